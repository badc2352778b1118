"""
Overload resolver tests (ordering, arity, trial coercion, variadic tails).

Scope
- Validate candidate ordering by slack, exactness and declaration order.
- Validate exact arity against variadic signatures.
- Validate the distinction between arity failures and coercion failures.
- Validate determinism of repeated resolution.

Conventions
- Test method names follow CamelCase per project convention.
- Signatures are built directly; their callables return the received values.
"""

import unittest
from unittest import TestCase

from helmsman import ParameterSpec, Signature, TypeRegistry, CoercionError, order, resolve


def overload(*tags, variadic=False):
    parameters = [ParameterSpec("p%d" % index, tag) for index, tag in enumerate(tags)]
    if variadic:
        parameters[-1] = ParameterSpec(parameters[-1].name, parameters[-1].tag, variadic=True)
    return Signature(lambda *values: values, parameters)


class TestOrder(TestCase):
    """order() ranks the eligible candidates."""

    def testTooDemandingCandidatesAreDropped(self):
        two, three = overload(int, int), overload(int, int, int)
        self.assertEqual(order([three, two], 2), [two])

    def testExactBeforeVariadicAtEqualSlack(self):
        variadic = overload(str, str, str, variadic=True)
        exact = overload(str, str)
        self.assertEqual(order([variadic, exact], 2), [exact, variadic])

    def testDeclarationOrderBreaksTies(self):
        first, second = overload(int), overload(str)
        self.assertEqual(order([first, second], 1), [first, second])


class TestResolve(TestCase):
    """resolve() picks a signature and coerces its values."""

    def setUp(self):
        self.types = TypeRegistry()

    def testExactArityIsSelected(self):
        two, three = overload(int, int), overload(int, int, int)
        resolution = resolve([two, three], ["1", "2"], self.types)
        self.assertIs(resolution.signature, two)
        self.assertEqual(resolution.values, (1, 2))

        resolution = resolve([two, three], ["1", "2", "3"], self.types)
        self.assertIs(resolution.signature, three)
        self.assertEqual(resolution.values, (1, 2, 3))

    def testFewerTokensIsAnArityFailure(self):
        resolution = resolve([overload(int, int)], ["1"], self.types)
        self.assertFalse(resolution)
        self.assertFalse(resolution.shaped)
        self.assertIsNone(resolution.error)

    def testMoreTokensIsAnArityFailure(self):
        resolution = resolve([overload(int)], ["1", "2"], self.types)
        self.assertFalse(resolution)
        self.assertFalse(resolution.shaped)

    def testCoercionFailureIsShaped(self):
        resolution = resolve([overload(int)], ["one"], self.types)
        self.assertFalse(resolution)
        self.assertTrue(resolution.shaped)
        self.assertIsInstance(resolution.error, CoercionError)

    def testFallsThroughToNextCandidate(self):
        number, text = overload(int), overload(str)
        resolution = resolve([number, text], ["abc"], self.types)
        self.assertIs(resolution.signature, text)
        self.assertEqual(resolution.values, ("abc",))

    def testVariadicMatchesAnyCountAboveItsPrefix(self):
        variadic = overload(int, str, variadic=True)
        for count in range(1, 5):
            tokens = ["7"] + ["x"] * (count - 1)
            with self.subTest(count=count):
                resolution = resolve([variadic], tokens, self.types)
                self.assertIs(resolution.signature, variadic)
                self.assertEqual(resolution.values, (7, ("x",) * (count - 1)))
        self.assertFalse(resolve([variadic], [], self.types))

    def testVariadicLosesToExactArity(self):
        variadic = overload(str, variadic=True)
        exact = overload(str, str)
        resolution = resolve([variadic, exact], ["a", "b"], self.types)
        self.assertIs(resolution.signature, exact)

        resolution = resolve([variadic, exact], ["a", "b", "c"], self.types)
        self.assertIs(resolution.signature, variadic)
        self.assertEqual(resolution.values, (("a", "b", "c"),))

    def testVariadicTailIsCoerced(self):
        resolution = resolve([overload(int, variadic=True)], ["1", "2"], self.types)
        self.assertEqual(resolution.values, ((1, 2),))

        resolution = resolve([overload(int, variadic=True)], ["1", "two"], self.types)
        self.assertFalse(resolution)
        self.assertTrue(resolution.shaped)
        self.assertEqual(resolution.error.token, "two")

    def testRejectedVariadicTailFallsThrough(self):
        numbers, words = overload(int, variadic=True), overload(str, variadic=True)
        resolution = resolve([numbers, words], ["a", "b"], self.types)
        self.assertIs(resolution.signature, words)
        self.assertEqual(resolution.values, (("a", "b"),))

        resolution = resolve([numbers, words], ["1", "2"], self.types)
        self.assertIs(resolution.signature, numbers)
        self.assertEqual(resolution.values, ((1, 2),))

    def testEmptyTokensSelectNullarySignature(self):
        nullary = overload()
        resolution = resolve([overload(int), nullary], [], self.types)
        self.assertIs(resolution.signature, nullary)
        self.assertEqual(resolution.values, ())

    def testResolutionIsDeterministic(self):
        candidates = [overload(str, variadic=True), overload(int, int), overload(str, str), overload(int, str)]
        selected = {resolve(candidates, ["1", "x"], self.types).signature for _ in range(20)}
        self.assertEqual(selected, {candidates[2]})


if __name__ == "__main__":
    unittest.main()
