"""
Faults module tests (codes, options, rendering, trigger).

Scope
- Validate the exception hierarchy callers rely on for exit statuses.
- Validate option merging through __replace__ and trigger().
- Validate rich rendering of faults and warnings.

Conventions
- Test method names follow CamelCase per project convention.
"""
import io
import unittest
from unittest import TestCase

from rich.console import Console

from flagbind.faults import *


def render(renderable):
    console = Console(file=io.StringIO(), width=120, color_system=None, highlight=False)
    console.print(renderable)
    return console.file.getvalue()


class TestHierarchy(TestCase):

    def testParseErrors(self):
        for cls in (
            MalformedTokenError,
            UnknownFlagError,
            MissingValueError,
            InvalidValueError,
            UnexpectedPositionalError,
            TooManyPositionalsError,
            UnknownCommandError,
            MissingCommandError,
        ):
            self.assertTrue(issubclass(cls, ParseError), cls)
            self.assertTrue(issubclass(cls, CommandException), cls)

    def testHelpIsNotParseError(self):
        self.assertTrue(issubclass(HelpRequested, CommandException))
        self.assertFalse(issubclass(HelpRequested, ParseError))

    def testConfigurationErrorIsTypeError(self):
        self.assertTrue(issubclass(ConfigurationError, TypeError))
        self.assertFalse(issubclass(ConfigurationError, CommandException))

    def testWarning(self):
        self.assertTrue(issubclass(InvalidEnvironmentWarning, Warning))


class TestFault(TestCase):

    def testMessageAndOptions(self):
        fault = UnknownFlagError("unknown flag '-x' at first position", code=FaultCode.UNKNOWN_FLAG)
        self.assertEqual(str(fault), "unknown flag '-x' at first position")
        self.assertEqual(fault.options["code"], FaultCode.UNKNOWN_FLAG)
        with self.assertRaises(TypeError):
            fault.options["code"] = 0

    def testReplaceMergesOptions(self):
        fault = MissingValueError("needs a value", prog="tool", index=1)
        replaced = fault.__replace__(index=2, shell=False)
        self.assertIsInstance(replaced, MissingValueError)
        self.assertEqual(replaced.message, "needs a value")
        self.assertEqual(dict(replaced.options), {"prog": "tool", "index": 2, "shell": False})
        self.assertEqual(fault.options["index"], 1)

    def testTriggerRaisesInLibraryMode(self):
        with self.assertRaises(UnknownCommandError) as context:
            trigger(UnknownCommandError("unknown command 'x'"), prog="tool")
        self.assertEqual(context.exception.options["prog"], "tool")

    def testTriggerWarnsInLibraryMode(self):
        with self.assertWarns(InvalidEnvironmentWarning):
            trigger(InvalidEnvironmentWarning("bad environment"))

    def testTriggerRejectsPlainObjects(self):
        with self.assertRaises(TypeError):
            trigger(ValueError("plain"))

    def testNormalize(self):
        self.assertEqual(FaultCode.UNKNOWN_FLAG.normalize(), str(FaultCode.UNKNOWN_FLAG.value))


class TestRendering(TestCase):

    def testFaultRendering(self):
        text = render(InvalidValueError(
            "invalid value 'x' for flag '-n' at first position",
            title="invalid value",
            code=FaultCode.INVALID_VALUE,
            prog="tool",
            hint="use a valid int for '-n'",
        ))
        self.assertIn("tool", text)
        self.assertIn(str(FaultCode.INVALID_VALUE.value), text)
        self.assertIn("Invalid Value", text)
        self.assertIn("invalid value 'x' for flag '-n' at first position", text)
        self.assertIn("use a valid int for '-n'", text)

    def testWarningRendering(self):
        text = render(InvalidEnvironmentWarning(
            "environment variable PORT='x' is not a valid int",
            title="invalid environment value",
            code=FaultCode.INVALID_ENVIRONMENT,
        ))
        self.assertIn("Invalid Environment Value", text)
        self.assertIn("PORT='x'", text)

    def testHelpRendersMessageWithoutUsage(self):
        self.assertIn("help requested", render(HelpRequested("help requested")))


if __name__ == '__main__':
    unittest.main()
