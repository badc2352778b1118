"""
Helmsman overload resolver: pick one signature for a list of tokens.

Algorithm
1. discard candidates needing more tokens than supplied (required count > tokens).
2. order the rest by slack (tokens minus required count), exact signatures
   before variadic ones at equal slack, then by declaration order.
3. trial-coerce in that order:
   • a non-variadic signature needs exactly one token per parameter, each one
     accepted by the type registry;
   • a variadic signature coerces its required prefix and absorbs the rest.
4. the first signature passing the trial wins.

The search is greedy first-fit: no backtracking across overloads, so repeated
resolution of the same input always yields the same signature.

Outcome
- resolve() returns a Resolution, truthy on success, carrying the signature and
  the coerced values (the variadic value is a tuple).
- on failure, Resolution.shaped tells apart "no signature has this arity"
  (False → wrong usage) from "an arity-matched signature rejected a token"
  (True → argument parsing error); Resolution.error keeps the first
  CoercionError seen.
"""
import logging
from collections import namedtuple

from .coercion import CoercionError

logger = logging.getLogger(__name__)


class Resolution(namedtuple("Resolution", ("signature", "values", "shaped", "error"))):
    """
    Result of resolve(); truthy when a signature was selected.
    """
    __slots__ = ()

    def __bool__(self):
        return self.signature is not None


def order(candidates, count, /):
    """
    Return the candidates eligible for count tokens, best first.
    """
    eligible = [(index, signature) for index, signature in enumerate(candidates) if signature.required <= count]
    eligible.sort(key=lambda pair: (count - pair[1].required, pair[1].variadic, pair[0]))
    return [signature for _, signature in eligible]


def resolve(candidates, tokens, types, /):
    """
    Select the overload matching tokens and coerce its values.

    Parameters
    - candidates: Iterable[Signature], in declaration order.
    - tokens: Sequence[str] aligned with the parameters.
    - types: TypeRegistry used for trial coercion.

    A variadic tail is coerced to its tag as part of the trial (str tags keep
    the raw tokens); a rejected tail token moves on to the next candidate.
    """
    tokens = list(tokens)
    shaped = False
    error = None

    for signature in order(list(candidates), len(tokens)):
        if not signature.variadic and signature.arity != len(tokens):
            logger.debug("skipped %s: needs exactly %d token(s)", signature, signature.arity)
            continue
        shaped = True
        parameters = signature.parameters
        try:
            values = [
                types.coerce(parameter.tag, token)
                for parameter, token in zip(parameters[:signature.required], tokens)
            ]
        except CoercionError as exception:
            logger.debug("skipped %s: %s", signature, exception)
            error = error or exception
            continue

        if signature.variadic:
            try:
                values.append(tuple(types.coerce(parameters[-1].tag, token) for token in tokens[signature.required:]))
            except CoercionError as exception:
                logger.debug("rejected %s: %s", signature, exception)
                error = error or exception
                continue

        logger.debug("selected %s for %d token(s)", signature, len(tokens))
        return Resolution(signature, tuple(values), True, None)

    return Resolution(None, (), shaped, error)


__all__ = (
    "Resolution",
    "order",
    "resolve",
)
