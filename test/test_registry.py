"""
Registry behavioral tests (registration, read pass, usage, reporting).

Scope
- Validate the two-phase contract: factories register, read() classifies and dispatches.
- Validate the three-way taxonomy: per-descriptor errors, unrecognized tokens,
  anonymous tokens.
- Validate usage alignment and the documented accumulation caveat.

Conventions
- Test method names follow CamelCase per project convention.
- Reads pass an explicit sink to keep stderr quiet.
"""
import io
import os
import tempfile
import unittest
from unittest import TestCase

from rich.console import Console

from registrar import (
    Registry,
    Flag,
    Value,
    File,
    ReadExit,
    ParseFault,
    UnrecognizedOptionFault,
    FaultCode,
)


class TestRegistration(TestCase):

    def testFactoriesRegisterAndReturnDescriptors(self):
        registry = Registry()
        x = registry.flag("x")
        n = registry.value("n", int)
        c = registry.file("c")
        self.assertIsInstance(x, Flag)
        self.assertIsInstance(n, Value)
        self.assertIsInstance(c, File)
        self.assertEqual(list(registry), [x, n, c])
        self.assertEqual(len(registry), 3)
        self.assertIs(registry["n"], n)
        self.assertIn("x", registry)
        self.assertIn(c, registry)
        self.assertNotIn(Flag("x"), registry)

    def testRegisterExternalDescriptor(self):
        registry = Registry()
        v = Value("v", float).default(1.5)
        self.assertIs(registry.register(v), v)
        self.assertIs(registry["v"], v)

    def testRegisterRejectsNonDescriptor(self):
        with self.assertRaises(TypeError):
            Registry().register("x")

    def testDuplicateShortOptionRejected(self):
        registry = Registry()
        registry.flag("x")
        with self.assertRaises(ValueError):
            registry.value("x")

    def testDuplicateAliasRejected(self):
        registry = Registry()
        registry.flag("x").alternate("same")
        with self.assertRaises(ValueError):
            registry.register(Flag("y").alternate("same"))
        self.assertNotIn("y", registry)

    def testDuplicateAliasChainedAfterFactoryRejected(self):
        registry = Registry()
        registry.flag("a").alternate("same")
        b = registry.flag("b")
        with self.assertRaises(ValueError):
            b.alternate("same")
        self.assertEqual(b.alias, "")
        self.assertEqual(registry.table.longs, {"same": "a"})
        self.assertTrue(registry.read(["prog", "--same"], None))
        self.assertTrue(registry["a"])
        self.assertFalse(b)

    def testRealiasingItselfIsAllowed(self):
        registry = Registry()
        a = registry.flag("a").alternate("same")
        self.assertIs(a.alternate("same"), a)
        a.alternate("")
        self.assertIs(registry.flag("b").alternate("same"), registry["b"])

    def testAliasCheckIsPerRegistry(self):
        first = Registry()
        second = Registry()
        first.flag("a").alternate("same")
        self.assertEqual(second.flag("b").alternate("same").alias, "same")

    def testUnknownLookupRaisesKeyError(self):
        with self.assertRaises(KeyError):
            Registry()["z"]

    def testTableIsCachedUntilRegistrationChanges(self):
        registry = Registry()
        x = registry.flag("x")
        table = registry.table
        self.assertIs(registry.table, table)
        x.alternate("execute")
        self.assertIsNot(registry.table, table)
        self.assertEqual(registry.table.longs, {"execute": "x"})
        table = registry.table
        registry.flag("y")
        self.assertIsNot(registry.table, table)

    def testFillMustBeOneCharacter(self):
        with self.assertRaises(TypeError):
            Registry(fill="..")


class TestRead(TestCase):

    def testClassification(self):
        registry = Registry()
        x = registry.flag("x")
        b = registry.value("b").alternate("bar")
        sink = io.StringIO()
        self.assertTrue(registry.read(["prog", "-x", "foo", "--bar", "baz", "qux"], sink))
        self.assertEqual(registry.anonymous, ("foo", "qux"))
        self.assertTrue(x)
        self.assertEqual(b.value, "baz")
        self.assertEqual(registry.unrecognized_tokens, ())
        self.assertEqual(sink.getvalue(), "")
        self.assertTrue(registry.good())
        self.assertFalse(registry.fail())

    def testAbsentOptionsKeepDefaults(self):
        registry = Registry()
        x = registry.flag("x")
        n = registry.value("n", int).default(11)
        self.assertTrue(registry.read(["prog"], None))
        self.assertFalse(x)
        self.assertEqual(n.value, 11)

    def testIntegerValue(self):
        registry = Registry()
        v = registry.value("V", int)
        self.assertTrue(registry.read(["prog", "-V", "42"], None))
        self.assertEqual(v.value, 42)

    def testParseErrorIsRecorded(self):
        registry = Registry()
        v = registry.value("V", int).default(5)
        sink = io.StringIO()
        self.assertFalse(registry.read(["prog", "-V", "not_a_number"], sink))
        self.assertEqual(sink.getvalue(), "Error (-V): Unable to parse input value!\n")
        self.assertEqual(v.value, 5)
        self.assertEqual(registry.errors, (v,))
        self.assertTrue(registry.error())
        self.assertFalse(registry.unrecognized())
        self.assertTrue(registry.fail())
        self.assertIsInstance(registry.faults[0], ParseFault)

    def testUnrecognizedOption(self):
        registry = Registry()
        registry.flag("x")
        sink = io.StringIO()
        self.assertFalse(registry.read(["prog", "-z"], sink))
        self.assertEqual(registry.unrecognized_tokens, ("-z",))
        self.assertTrue(registry.unrecognized())
        self.assertFalse(registry.error())
        self.assertFalse(registry.good())
        self.assertEqual(sink.getvalue(), "")
        fault = registry.faults[0]
        self.assertIsInstance(fault, UnrecognizedOptionFault)
        self.assertEqual(fault.code, FaultCode.UNRECOGNIZED_OPTION)
        self.assertEqual(fault.options["token"], "-z")

    def testUnrecognizedSuggestsCloseAlias(self):
        registry = Registry()
        registry.flag("v").alternate("verbose")
        registry.read(["prog", "--verbos"], None)
        self.assertEqual(registry.faults[0].options["suggestions"][0], "--verbose")
        self.assertIn("--verbose", registry.faults[0].options["hint"])

    def testOperandBoundToOptionIsNotClassified(self):
        registry = Registry()
        o = registry.value("o")
        b = registry.flag("b")
        self.assertTrue(registry.read(["prog", "-o", "-b"], None))
        self.assertEqual(o.value, "-b")
        self.assertFalse(b)
        self.assertEqual(registry.unrecognized_tokens, ())
        self.assertEqual(registry.anonymous, ())

    def testAnonymousCarriesNoFailure(self):
        registry = Registry()
        self.assertTrue(registry.read(["prog", "a", "b", "--", "-c"], None))
        self.assertEqual(registry.anonymous, ("a", "b", "-c"))
        self.assertTrue(registry.good())

    def testPassCompletesAfterFailures(self):
        registry = Registry()
        a = registry.value("a", int)
        b = registry.value("b", int)
        c = registry.value("c", int)
        self.assertFalse(registry.read(["prog", "-a", "x", "-b", "2", "-c", "y", "-q"], None))
        self.assertEqual(registry.errors, (a, c))
        self.assertEqual(b.value, 2)
        self.assertEqual(registry.unrecognized_tokens, ("-q",))
        self.assertEqual(len(registry.faults), 3)

    def testMissingDefaultFile(self):
        directory = tempfile.TemporaryDirectory()
        self.addCleanup(directory.cleanup)
        registry = Registry()
        c = registry.file("c", int).path(os.path.join(directory.name, "absent.txt"))
        sink = io.StringIO()
        self.assertFalse(registry.read(["prog"], sink))
        self.assertEqual(sink.getvalue(), "Error (-c): Unable to read input file!\n")
        self.assertEqual(registry.errors, (c,))

    def testFileOperandOverride(self):
        directory = tempfile.TemporaryDirectory()
        self.addCleanup(directory.cleanup)
        default = os.path.join(directory.name, "default.txt")
        other = os.path.join(directory.name, "other.txt")
        with open(default, "w", encoding="utf-8") as file:
            file.write("10\n")
        with open(other, "w", encoding="utf-8") as file:
            file.write("20\n")

        first = Registry()
        c = first.file("c", int).path(default)
        self.assertTrue(first.read(["prog"], None))
        self.assertEqual(c.value, 10)

        second = Registry()
        c = second.file("c", int).path(default)
        self.assertTrue(second.read(["prog", "-c", other], None))
        self.assertEqual(c.value, 20)
        self.assertEqual(c.location, other)

    def testReadAccumulatesAcrossCalls(self):
        registry = Registry()
        n = registry.value("n", int)
        argv = ["prog", "-n", "x", "-z", "a"]
        registry.read(argv, None)
        registry.read(argv, None)
        self.assertEqual(registry.errors, (n, n))
        self.assertEqual(registry.unrecognized_tokens, ("-z", "-z"))
        self.assertEqual(registry.anonymous, ("a", "a"))
        self.assertEqual(len(registry.faults), 4)

    def testSequencesAreSnapshots(self):
        registry = Registry()
        registry.read(["prog", "a"], None)
        anonymous = registry.anonymous
        registry.read(["prog", "b"], None)
        self.assertEqual(anonymous, ("a",))
        self.assertEqual(registry.anonymous, ("a", "b"))

    def testReadLogsSummary(self):
        registry = Registry()
        registry.flag("x")
        with self.assertLogs("registrar.registry", level="INFO") as logs:
            registry.read(["prog", "-x", "a"], None)
        self.assertEqual(len(logs.records), 1)
        self.assertIn("1 anonymous", logs.output[0])


class TestUsage(TestCase):

    def setUp(self):
        self.registry = Registry()
        self.registry.flag("x").alternate("execute")
        self.registry.value("n", int)
        self.registry.file("c").alternate("config")

    def testUsageLines(self):
        self.assertEqual(self.registry.usage(), "\n".join((
            "  -x --execute  " + "." * 8 + " Flag Arg",
            "  -n <arg> " + "." * 13 + " Value Arg",
            "  -c --config <path> " + "." * 3 + " File Arg",
        )))

    def testDescriptionsAreAligned(self):
        for indent in (0, 2, 6):
            lines = self.registry.usage(indent).split("\n")
            self.assertEqual(len(lines), 3)
            offsets = set()
            for line, descr in zip(lines, ("Flag Arg", "Value Arg", "File Arg")):
                self.assertTrue(line.startswith(" " * indent + "-"))
                self.assertTrue(line.endswith(descr))
                offsets.add(len(line) - len(descr))
            self.assertEqual(offsets, {indent + 19 + 4})

    def testCustomFillAndDescriptions(self):
        registry = Registry(fill="_")
        registry.flag("a").description("Alpha")
        registry.value("b").usage("<bee>").description("Beta")
        self.assertEqual(registry.usage(1), "\n".join((
            " -a  " + "_" * 5 + "... Alpha",
            " -b <bee> ... Beta",
        )))

    def testEmptyRegistry(self):
        self.assertEqual(Registry().usage(), "")

    def testIndentValidation(self):
        with self.assertRaises(ValueError):
            self.registry.usage(-1)
        with self.assertRaises(TypeError):
            self.registry.usage("2")

    def testRichTable(self):
        console = Console(file=io.StringIO(), width=120, color_system=None)
        console.print(self.registry)
        output = console.file.getvalue()
        self.assertIn("-x, --execute", output)
        self.assertIn("<path>", output)
        self.assertIn("Value Arg", output)


class TestReporting(TestCase):

    def testReportPrintsFaults(self):
        registry = Registry(colorful=False)
        registry.value("n", int)
        registry.read(["bin/tool", "-n", "x", "-z"], None)
        console = Console(file=io.StringIO(), width=120, color_system=None)
        self.assertEqual(registry.report(console), 2)
        output = console.file.getvalue()
        self.assertIn("tool", output)
        self.assertIn("Bad Read", output)
        self.assertIn("Error (-n): Unable to parse input value!", output)
        self.assertIn("unrecognized option '-z'", output)

    def testReportWithoutFaultsPrintsNothing(self):
        console = Console(file=io.StringIO(), width=120, color_system=None)
        self.assertEqual(Registry().report(console), 0)
        self.assertEqual(console.file.getvalue(), "")

    def testVerifyRaisesGroup(self):
        registry = Registry()
        registry.value("n", int)
        registry.read(["prog", "-n", "x"], None)
        with self.assertRaises(ReadExit) as caught:
            registry.verify()
        self.assertEqual(len(caught.exception.exceptions), 1)
        self.assertIsInstance(caught.exception.exceptions[0], ParseFault)

    def testVerifyReturnsRegistryWhenGood(self):
        registry = Registry()
        registry.read(["prog"], None)
        self.assertIs(registry.verify(), registry)


if __name__ == "__main__":
    unittest.main()
