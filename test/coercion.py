"""
Type coercion registry tests (built-in parsers, enums, registration lifecycle).

Scope
- Validate the built-in integer, floating point, boolean and text parsers.
- Validate width-tagged integers and single precision floats.
- Validate the case-insensitive enumeration parser.
- Validate registration refusals (duplicates, frozen registry) and isolation.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (TypeRegistry, CoercionError and the width tags).
"""

import enum
import unittest
from unittest import TestCase

from helmsman import TypeRegistry, CoercionError, int8, uint8, uint16, float32


class Color(enum.Enum):
    RED = 1
    GREEN = 2
    BLUE = 3


class TestBuiltinParsers(TestCase):
    """Built-in parsers copied into every registry."""

    def setUp(self):
        self.types = TypeRegistry()

    def testIntegerAcceptsSignedDigits(self):
        self.assertEqual(self.types.coerce(int, "42"), 42)
        self.assertEqual(self.types.coerce(int, "-17"), -17)
        self.assertEqual(self.types.coerce(int, "+5"), 5)

    def testIntegerRejectsOtherShapes(self):
        for token in ("1.0", "0x10", "", "ten", "1_000"):
            with self.subTest(token=token), self.assertRaises(CoercionError):
                self.types.coerce(int, token)

    def testWidthTagsAreRangeChecked(self):
        self.assertEqual(self.types.coerce(int8, "127"), 127)
        self.assertEqual(self.types.coerce(int8, "-128"), -128)
        with self.assertRaises(CoercionError):
            self.types.coerce(int8, "128")
        with self.assertRaises(CoercionError):
            self.types.coerce(uint8, "-1")
        self.assertEqual(self.types.coerce(uint16, "65535"), 65535)

    def testFloatParsing(self):
        self.assertEqual(self.types.coerce(float, "1.5"), 1.5)
        self.assertEqual(self.types.coerce(float, "-2e3"), -2000.0)
        with self.assertRaises(CoercionError):
            self.types.coerce(float, "1_0")
        with self.assertRaises(CoercionError):
            self.types.coerce(float, "one")

    def testSinglePrecisionRange(self):
        self.assertEqual(self.types.coerce(float32, "1e38"), 1e38)
        with self.assertRaises(CoercionError):
            self.types.coerce(float32, "1e39")

    def testBooleanIsCaseInsensitive(self):
        self.assertIs(self.types.coerce(bool, "true"), True)
        self.assertIs(self.types.coerce(bool, "FALSE"), False)
        with self.assertRaises(CoercionError):
            self.types.coerce(bool, "yes")

    def testTextIsPassedThrough(self):
        self.assertEqual(self.types.coerce(str, "hello world"), "hello world")

    def testNonStringTokenRaisesTypeError(self):
        with self.assertRaises(TypeError):
            self.types.coerce(int, 42)

    def testUnknownTagFails(self):
        with self.assertRaises(CoercionError) as context:
            self.types.coerce(complex, "1j")
        self.assertIn("no parser registered", str(context.exception))

    def testCoercionErrorCarriesTagAndToken(self):
        with self.assertRaises(CoercionError) as context:
            self.types.coerce(int, "abc")
        self.assertIs(context.exception.tag, int)
        self.assertEqual(context.exception.token, "abc")
        self.assertIsInstance(context.exception, ValueError)

    def testFormattedValuesCoerceBack(self):
        for value in (0, -17, 2 ** 40, 3.25, -0.5, 1e-7, 1e300, True, False):
            with self.subTest(value=value):
                self.assertEqual(self.types.coerce(type(value), str(value)), value)


class TestEnumerationParser(TestCase):
    """Any enum.Enum subclass is parsed by member name."""

    def setUp(self):
        self.types = TypeRegistry()

    def testExactName(self):
        self.assertIs(self.types.coerce(Color, "RED"), Color.RED)

    def testNameIsCaseInsensitive(self):
        self.assertIs(self.types.coerce(Color, "green"), Color.GREEN)
        self.assertIs(self.types.coerce(Color, "bLuE"), Color.BLUE)

    def testMissingMemberFails(self):
        with self.assertRaises(CoercionError) as context:
            self.types.coerce(Color, "purple")
        self.assertIn("RED", str(context.exception))

    def testEnumTypesAreKnown(self):
        self.assertIn(Color, self.types)
        self.assertNotIn(complex, self.types)

    def testRegisteredParserWinsOverByName(self):
        self.assertTrue(self.types.register(Color, lambda token: Color(int(token))))
        self.assertIs(self.types.coerce(Color, "2"), Color.GREEN)


class TestRegistration(TestCase):
    """Registration lifecycle of TypeRegistry."""

    def testRegisterNewTag(self):
        types = TypeRegistry()
        self.assertTrue(types.register(complex, complex))
        self.assertEqual(types.coerce(complex, "1+2j"), 1 + 2j)

    def testDuplicateTagIsRefused(self):
        types = TypeRegistry()
        self.assertFalse(types.register(int, lambda token: 0))
        self.assertEqual(types.coerce(int, "7"), 7)

    def testFrozenRegistryRefuses(self):
        types = TypeRegistry()
        types.freeze()
        self.assertTrue(types.frozen)
        self.assertFalse(types.register(complex, complex))

    def testNonCallableParserRaises(self):
        with self.assertRaises(TypeError):
            TypeRegistry().register(complex, "complex")

    def testUnhashableTagRaises(self):
        with self.assertRaises(TypeError):
            TypeRegistry().register([], str)

    def testRegistriesAreIndependent(self):
        first, second = TypeRegistry(), TypeRegistry()
        first.register(complex, complex)
        self.assertIn(complex, first)
        self.assertNotIn(complex, second)

    def testParserExceptionsOtherThanValueErrorsPropagate(self):
        def broken(token):
            raise RuntimeError("boom")

        types = TypeRegistry()
        types.register(complex, broken)
        with self.assertRaises(RuntimeError):
            types.coerce(complex, "1")


if __name__ == "__main__":
    unittest.main()
