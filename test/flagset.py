"""
FlagSet behavioral tests (token grammar, help pre-scan, scanner faults).

Scope
- Validate the equivalent spellings of a flag with a value.
- Validate bare boolean flags and explicit boolean values.
- Validate termination rules ("--", "-", "" and non-flag tokens).
- Validate that scan() detects help without writing anything.
- Validate friendly faults for malformed, unknown, valueless and invalid flags.

Conventions
- Test method names follow CamelCase per project convention.
- Cells are wired by hand; field reflection is covered elsewhere.
"""
import unittest
from dataclasses import dataclass
from unittest import TestCase

from flagbind.faults import *
from flagbind.flagset import FlagSet
from flagbind.values import Cell


@dataclass
class Record:
    verbose: bool = False
    level: int = 0
    name: str = ""


def flagset(record):
    flags = FlagSet("tool")
    flags.var(Cell(record, "verbose", "bool"), "verbose")
    flags.var(Cell(record, "verbose", "bool"), "v")
    flags.var(Cell(record, "level", "int"), "level")
    flags.var(Cell(record, "name", "string"), "name")
    return flags


class TestGrammar(TestCase):

    def testEquivalentSpellings(self):
        for tokens in (["-level", "3"], ["-level=3"], ["--level", "3"], ["--level=3"]):
            record = Record()
            self.assertEqual(flagset(record).parse(tokens), [])
            self.assertEqual(record.level, 3, tokens)

    def testBareBooleanIsTrue(self):
        record = Record()
        flagset(record).parse(["-v"])
        self.assertTrue(record.verbose)

    def testExplicitBooleanValue(self):
        record = Record(verbose=True)
        flagset(record).parse(["-verbose=false"])
        self.assertFalse(record.verbose)

    def testBooleanDoesNotConsumeNextToken(self):
        record = Record()
        leftovers = flagset(record).parse(["-v", "false"])
        self.assertTrue(record.verbose)
        self.assertEqual(leftovers, ["false"])

    def testValueFlagConsumesDashedToken(self):
        record = Record()
        flagset(record).parse(["-name", "-v"])
        self.assertEqual(record.name, "-v")
        self.assertFalse(record.verbose)

    def testEmptyValueIsAccepted(self):
        record = Record(name="before")
        flagset(record).parse(["-name", ""])
        self.assertEqual(record.name, "")

    def testDoubleDashStopsAndIsConsumed(self):
        record = Record()
        leftovers = flagset(record).parse(["-v", "--", "-level", "3"])
        self.assertEqual(leftovers, ["-level", "3"])
        self.assertEqual(record.level, 0)

    def testNonFlagTokensStopScanning(self):
        for stop in ("file", "-", ""):
            record = Record()
            leftovers = flagset(record).parse(["-v", stop, "-level", "3"])
            self.assertEqual(leftovers, [stop, "-level", "3"])
            self.assertEqual(record.level, 0)

    def testLastAssignmentWins(self):
        record = Record()
        flagset(record).parse(["-level", "1", "-level=2"])
        self.assertEqual(record.level, 2)


class TestHelp(TestCase):

    def testHelpSpellings(self):
        for token in ("-h", "-help", "--h", "--help"):
            with self.assertRaises(HelpRequested):
                flagset(Record()).scan(["-v", token])

    def testScanNeverWrites(self):
        record = Record()
        with self.assertRaises(HelpRequested):
            flagset(record).scan(["-v", "-level", "5", "-h"])
        self.assertEqual(record, Record())

    def testScanIgnoresOtherFaults(self):
        record = Record()
        flagset(record).scan(["-nope", "-level", "many", "---x", "-name"])
        self.assertEqual(record, Record())

    def testHelpAfterTerminatorIsPositional(self):
        self.assertEqual(flagset(Record()).parse(["--", "-h"]), ["-h"])

    def testHelpAsFlagValueIsNotHelp(self):
        record = Record()
        flags = flagset(record)
        flags.scan(["-name", "-h"])
        flags.parse(["-name", "-h"])
        self.assertEqual(record.name, "-h")

    def testDefinedHelpFlagShadowsHelp(self):
        record = Record()
        flags = FlagSet("tool")
        flags.var(Cell(record, "verbose", "bool"), "h")
        flags.scan(["-h"])
        flags.parse(["-h"])
        self.assertTrue(record.verbose)

    def testHelpCarriesContext(self):
        flags = flagset(Record())
        flags.usage = "USAGE"
        with self.assertRaises(HelpRequested) as context:
            flags.scan(["-help"])
        self.assertEqual(context.exception.options["usage"], "USAGE")
        self.assertEqual(context.exception.options["prog"], "tool")
        self.assertNotIsInstance(context.exception, ParseError)


class TestFaults(TestCase):

    def testMalformedToken(self):
        for token in ("---x", "-=x", "--=x"):
            with self.assertRaises(MalformedTokenError) as context:
                flagset(Record()).parse(["-v", token])
            self.assertEqual(context.exception.options["index"], 2)
            self.assertIn("second position", str(context.exception))

    def testUnknownFlagSuggestsCloseName(self):
        with self.assertRaises(UnknownFlagError) as context:
            flagset(Record()).parse(["-levle", "3"])
        fault = context.exception
        self.assertEqual(str(fault), "unknown flag '-levle' at first position")
        self.assertIn("level", fault.options["suggestions"])
        self.assertIn("-level", fault.options["hint"])
        self.assertEqual(fault.options["code"], FaultCode.UNKNOWN_FLAG)

    def testMissingValue(self):
        record = Record()
        with self.assertRaises(MissingValueError) as context:
            flagset(record).parse(["-v", "-level"])
        self.assertIn("needs a value", str(context.exception))
        # flags before the failing token stay bound
        self.assertTrue(record.verbose)

    def testInvalidValue(self):
        with self.assertRaises(InvalidValueError) as context:
            flagset(Record()).parse(["-level=high"])
        fault = context.exception
        self.assertEqual(fault.options["value"], "high")
        self.assertIsInstance(fault.__cause__, ValueError)
        self.assertIn("int", fault.options["hint"])

    def testInvalidBooleanValue(self):
        with self.assertRaises(InvalidValueError):
            flagset(Record()).parse(["-v=maybe"])


class TestRegistration(TestCase):

    def testRedefinitionRejected(self):
        record = Record()
        flags = FlagSet("tool")
        flags.var(Cell(record, "level", "int"), "level")
        with self.assertRaises(ConfigurationError):
            flags.var(Cell(record, "name", "string"), "level")

    def testInvalidNamesRejected(self):
        flags = FlagSet("tool")
        for name in ("", "-x", "a=b"):
            with self.assertRaises(ConfigurationError):
                flags.var(Cell(Record(), "level", "int"), name)

    def testLookup(self):
        flags = flagset(Record())
        for name in ("level", "name", "v", "verbose"):
            self.assertEqual(flags.lookup(name).name, name)
        self.assertEqual(flags.lookup("v").cell.attribute, "verbose")
        self.assertIsNone(flags.lookup("missing"))


if __name__ == '__main__':
    unittest.main()
