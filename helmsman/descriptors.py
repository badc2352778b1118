"""
Helmsman descriptors: plain data describing commands, subcommands and signatures.

Overview
- Descriptors
  • ParameterSpec: positional name, type tag and variadic flag.
  • Signature: ordered ParameterSpecs plus the callable they bind to.
  • SubcommandDescriptor: name (with its prefix), description and overloads.
  • CommandDescriptor: name (with its prefix), description, command type,
    constructor overloads and subcommands.

- Decorators
  • @command(name, descr=...): attach command metadata to a class.
  • @subcommand(name, descr=...): tag a method as a subcommand handler; the same
    name may tag several methods (overloads).
  • @constructor: mark a classmethod/staticmethod as an alternate constructor.

- Discovery
  • describe(cls): introspect a @command class once and build its descriptor.
    Annotations are the type tags (str when missing), *args becomes the
    variadic parameter and defaulted parameters expand into shorter overloads.

Descriptors are immutable after construction: every public field is a
read-only property (see utils.mirror) returning tuples/frozen views.

Quick example
    >>> @command("-w", descr="write a message")
    ... class Write:
    ...     def __init__(self, text: str): ...
    ...     @subcommand("--r", descr="paint it red")
    ...     def red(self, red: bool): ...
    ...     def execute(self): ...
    >>> describe(Write).name
    '-w'
"""
import builtins
import inspect
import logging
import re
from inspect import Parameter

from .coercion import typename
from .utils import *

logger = logging.getLogger(__name__)


class DescriptorType(type):
    """
    Metaclass of the descriptor classes.

    Every name in __introspectable__ becomes a read-only property over its
    "_" + name field, and the class gets a __typename__ ("CommandDescriptor"
    → "command-descriptor", used in error messages) plus __repr__ and
    __rich_repr__ built from those fields.
    """
    __introspectable__ = ()

    def __new__(mcs, name, bases, namespace, /, **options):
        for field in namespace.get("__introspectable__", ()):
            namespace.setdefault(field, mirror(field))
        namespace.setdefault("__typename__", "-".join(map(str.lower, re.findall(r"[A-Z][a-z0-9]*", name))))
        namespace.setdefault("__rich_repr__", _fields)
        namespace.setdefault("__repr__", _represent)
        return super().__new__(mcs, name, bases, namespace, **options)


def _fields(self):
    for field in type(self).__introspectable__:
        yield field, getattr(self, field)


def _represent(self):
    return "%s(%s)" % (type(self).__typename__, ", ".join("%s=%r" % pair for pair in _fields(self)))


def _sanitize_text(cls, field, value, /, optional=False):
    """
    Validate a name/description field: non-empty trimmed string (or Unset when optional).
    """
    if optional and value is Unset:
        return None
    if not isinstance(value, str):
        raise TypeError(f"{cls.__typename__} {field!r} must be a string")
    if not (value := value.strip()):
        raise ValueError(f"{cls.__typename__} {field!r} cannot be empty")
    return value


class ParameterSpec(metaclass=DescriptorType):
    """
    One positional parameter of a signature.

    Fields
    - name: parameter name (diagnostics and help only).
    - tag: type tag looked up in the TypeRegistry (any hashable; str by default).
    - variadic: True when the parameter absorbs all remaining tokens.
    """
    __introspectable__ = (
        "name",
        "tag",
        "variadic",
    )

    def __init__(self, name, tag=str, /, variadic=False):
        cls = type(self)
        try:
            hash(tag)
        except TypeError:
            raise TypeError(f"{cls.__typename__} 'tag' must be hashable") from None
        self._name = _sanitize_text(cls, "name", name)
        self._tag = tag
        self._variadic = bool(variadic)

    def __eq__(self, other):
        if not isinstance(other, ParameterSpec):
            return NotImplemented
        return (self.name, self.tag, self.variadic) == (other.name, other.tag, other.variadic)

    def __hash__(self):
        return hash((self.name, self.tag, self.variadic))

    def __str__(self):
        return "%s: %s%s" % (self.name, typename(self.tag), "..." * self.variadic)


class Signature(metaclass=DescriptorType):
    """
    One overload: ordered parameters plus the callable receiving the values.

    Invocation is uniform: invoke(values) takes one value per parameter, where
    the value of a variadic parameter is a sequence spread into the call.
    When a target is given (subcommand handlers) it is passed first.
    """
    __introspectable__ = (
        "callable",
        "parameters",
    )

    def __init__(self, callable, parameters=(), /):
        cls = type(self)
        if not builtins.callable(callable):
            raise TypeError(f"{cls.__typename__} 'callable' must be callable")

        sanitized = []
        for index, parameter in enumerate(parameters):
            if not isinstance(parameter, ParameterSpec):
                raise TypeError(f"{cls.__typename__} 'parameters' must contain parameter specs")
            if parameter.variadic and index != len(parameters) - 1:
                raise ValueError(f"{cls.__typename__} variadic parameter {parameter.name!r} must be the last one")
            sanitized.append(parameter)

        self._callable = callable
        self._parameters = sanitized

    @property
    def arity(self):
        """
        Total number of parameters (the variadic one included).
        """
        return len(self._parameters)

    @property
    def variadic(self):
        return bool(self._parameters) and self._parameters[-1].variadic

    @property
    def required(self):
        """
        Number of tokens that must be present (non-variadic parameters).
        """
        return self.arity - self.variadic

    def invoke(self, values, /, target=Unset):
        """
        Call the bound callable with one value per parameter.
        """
        if len(values) != self.arity:
            raise TypeError(f"{type(self).__typename__} expected {self.arity} values, got {len(values)}")
        arguments = list(values)
        if self.variadic:
            arguments[-1:] = arguments[-1]
        if target is not Unset:
            arguments.insert(0, target)
        return self._callable(*arguments)

    def __str__(self):
        return "(%s)" % ", ".join(map(str, self._parameters))


class SubcommandDescriptor(metaclass=DescriptorType):
    """
    A named subcommand with one or more method overloads.
    """
    __introspectable__ = (
        "name",
        "descr",
        "signatures",
    )

    def __init__(self, name, descr=Unset, signatures=(), /):
        cls = type(self)
        self._name = _sanitize_text(cls, "name", name)
        self._descr = _sanitize_text(cls, "descr", descr, optional=True)
        signatures = list(signatures)
        if not all(isinstance(signature, Signature) for signature in signatures):
            raise TypeError(f"{cls.__typename__} 'signatures' must contain signatures")
        if not signatures:
            raise ValueError(f"{cls.__typename__} must have at least one signature")
        self._signatures = signatures


class CommandDescriptor(metaclass=DescriptorType):
    """
    Everything the engine knows about one command.

    Fields
    - name: canonical name including the command prefix (e.g. "-w").
    - type: the command class (capability contract: callable execute()).
    - descr: short description or None.
    - constructors: constructor overloads in declaration order.
    - subcommands: subcommand descriptors in declaration order.
    """
    __introspectable__ = (
        "name",
        "descr",
        "type",
        "constructors",
        "subcommands",
    )

    def __init__(self, name, type, constructors=Unset, subcommands=(), /, descr=Unset):
        cls = builtins.type(self)
        self._name = _sanitize_text(cls, "name", name)
        self._descr = _sanitize_text(cls, "descr", descr, optional=True)
        if not isinstance(type, builtins.type):
            raise TypeError(f"{cls.__typename__} 'type' must be a class")
        # a bare class is constructed without arguments
        constructors = list(coalesce(constructors, [Signature(type)]))
        if not all(isinstance(signature, Signature) for signature in constructors):
            raise TypeError(f"{cls.__typename__} 'constructors' must contain signatures")
        if not constructors:
            raise ValueError(f"{cls.__typename__} must have at least one constructor")
        subcommands = list(subcommands)
        if not all(isinstance(subcommand, SubcommandDescriptor) for subcommand in subcommands):
            raise TypeError(f"{cls.__typename__} 'subcommands' must contain subcommand descriptors")
        self._type = type
        self._constructors = constructors
        self._subcommands = subcommands

    def lookup(self, name, /):
        """
        Return every overload registered under a subcommand name, in declaration order.
        """
        return [
            signature
            for subcommand in self._subcommands if subcommand.name == name
            for signature in subcommand.signatures
        ]


def command(name, /, descr=Unset):
    """
    Class decorator attaching command metadata (name with its prefix, description).

    The class is returned unchanged apart from a __command__ attribute;
    describe() turns it into a CommandDescriptor at registration.
    """
    if not isinstance(name, str):
        raise TypeError("@command() name must be a string")
    if not isinstance(descr, str | UnsetType):
        raise TypeError("@command() descr must be a string")

    @rename("command")
    def wrapper(cls, /):
        if not isinstance(cls, type):
            raise TypeError("@command() must be applied to a class")
        cls.__command__ = (name, descr)
        return cls

    return wrapper


def subcommand(name, /, descr=Unset):
    """
    Method decorator tagging a subcommand handler.
    """
    if not isinstance(name, str):
        raise TypeError("@subcommand() name must be a string")
    if not isinstance(descr, str | UnsetType):
        raise TypeError("@subcommand() descr must be a string")

    @rename("subcommand")
    def wrapper(function, /):
        if not inspect.isfunction(function):
            raise TypeError("@subcommand() must be applied to a plain method")
        function.__subcommand__ = (name, descr)
        return function

    return wrapper


def constructor(x, /):
    """
    Mark a classmethod or staticmethod as an alternate constructor.

    Works in either decorator order (@constructor above or below @classmethod).
    """
    target = getattr(x, "__func__", x)
    if not inspect.isfunction(target):
        raise TypeError("@constructor must be applied to a function")
    target.__constructor__ = True
    return x


def _tag(parameter, /):
    return str if parameter.annotation is Parameter.empty else parameter.annotation


def _expand(owner, callable, signature, /):
    """
    Turn an inspect.Signature into one or more Signatures.

    Defaulted positional parameters yield one extra overload per omittable
    parameter, shortest last; *args stays on the full-length overload only.
    """
    positionals = []
    variadic = None
    for parameter in signature.parameters.values():
        match parameter.kind:
            case Parameter.POSITIONAL_ONLY | Parameter.POSITIONAL_OR_KEYWORD:
                positionals.append(parameter)
            case Parameter.VAR_POSITIONAL:
                variadic = parameter
            case Parameter.KEYWORD_ONLY if parameter.default is Parameter.empty:
                raise TypeError(f"{owner} keyword-only parameter {parameter.name!r} must have a default")
            case Parameter.VAR_KEYWORD:
                raise TypeError(f"{owner} cannot take keyword arguments (**{parameter.name})")

    specs = [ParameterSpec(parameter.name, _tag(parameter)) for parameter in positionals]
    required = sum(parameter.default is Parameter.empty for parameter in positionals)

    if variadic is not None:
        overloads = [Signature(callable, specs + [ParameterSpec(variadic.name, _tag(variadic), variadic=True)])]
    else:
        overloads = [Signature(callable, specs)]
    for length in range(len(specs) - 1, required - 1, -1):
        overloads.append(Signature(callable, specs[:length]))
    return overloads


def _inspect(owner, function, /):
    try:
        return inspect.signature(function, eval_str=True)
    except NameError as exception:
        raise TypeError(f"{owner} annotations cannot be resolved: {exception}") from None
    except ValueError:
        # classes without an inspectable __init__ take no arguments
        return inspect.Signature()


def _members(cls, /):
    """
    Class attributes in declaration order, base classes first, overrides in place.
    """
    members = {}
    for klass in reversed(cls.__mro__):
        if klass is object:
            continue
        members.update(vars(klass))
    return members


def describe(cls, /):
    """
    Build the CommandDescriptor of a @command class by introspection.

    Constructors
    - the class itself (its __init__), then every @constructor member in
      declaration order.

    Subcommands
    - every @subcommand method; methods sharing a name become overloads of one
      SubcommandDescriptor (the first description given wins).

    Raises
    - TypeError: when cls is not a @command class or a signature cannot be used.
    """
    if not isinstance(cls, type) or not hasattr(cls, "__command__"):
        raise TypeError("describe() argument must be a @command class")
    name, descr = cls.__command__
    owner = "command %r" % name

    constructors = _expand(owner, cls, _inspect(owner, cls))
    subcommands = {}

    for attribute, member in _members(cls).items():
        function = getattr(member, "__func__", member)
        if getattr(function, "__constructor__", False):
            if not isinstance(member, classmethod | staticmethod):
                raise TypeError(f"{owner} constructor {attribute!r} must be a classmethod or staticmethod")
            bound = getattr(cls, attribute)
            constructors.extend(_expand(owner, bound, _inspect(owner, bound)))
        if hasattr(function, "__subcommand__") and inspect.isfunction(member):
            label, text = function.__subcommand__
            signature = _inspect(owner, member)
            # drop the instance parameter
            parameters = list(signature.parameters.values())[1:]
            entry = subcommands.setdefault(label, [text, []])
            entry[0] = coalesce(entry[0], text)
            entry[1].extend(_expand(owner, member, signature.replace(parameters=parameters)))

    descriptor = CommandDescriptor(
        name,
        cls,
        constructors,
        [SubcommandDescriptor(label, text, signatures) for label, (text, signatures) in subcommands.items()],
        descr=descr
    )
    logger.debug(
        "described %s: %d constructor(s), %d subcommand(s)",
        descriptor.name, len(descriptor.constructors), len(descriptor.subcommands)
    )
    return descriptor


__all__ = (
    "ParameterSpec",
    "Signature",
    "SubcommandDescriptor",
    "CommandDescriptor",
    "command",
    "subcommand",
    "constructor",
    "describe",
)
