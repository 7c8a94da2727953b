"""
Orchestrator behavioral tests (commanderize end to end).

Scope
- Validate the happy path: flags set on the record, then the behavior runs.
- Validate the phase each fault aborts in, and that later phases never run.
- Validate prompt handling (strings, token lists, sys.argv).
- Validate shell mode: rendered faults and process exit statuses.

Conventions
- Test method names follow CamelCase per project convention.
- Usage output and shell-mode faults go to in-memory consoles.
"""

from __future__ import annotations

import datetime
import io
import unittest
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from unittest import TestCase
from unittest.mock import patch

from rich.console import Console

from commandant import (
    BindingOptions,
    CommandNotFoundError,
    FlagSet,
    HelpRequestedError,
    MalformedCommandTokenError,
    MethodNotFoundError,
    MissingCommandArgumentError,
    NotARecordError,
    Phase,
    UnknownFlagError,
    UnparsedArgumentsError,
    UnsupportedFieldTypeError,
    UnsetFieldError,
    commanderize,
    int32,
)

if TYPE_CHECKING:
    from decimal import Decimal


@dataclass
class Test:
    __test__ = False

    Bool: bool = field(default=False, metadata={"cmd": "Test (bool) var."})
    Int: int32 = field(default=0, metadata={"cmd": "Test (int) var."})
    Str: str = field(default="", metadata={"cmd": "Test (string) var."})
    Dur: datetime.timedelta = field(default=datetime.timedelta(0), metadata={"cmd": "Test (duration) var."})
    calls: list = field(default_factory=list, metadata={"cmd": "-"})

    def Try(self):
        self.calls.append(("Try", self.Bool, self.Str))

    def Fail(self):
        raise RuntimeError("behavior failed")


@dataclass
class Alpha:
    calls: list = field(default_factory=list, metadata={"cmd": "-"})

    def Run(self):
        self.calls.append("Alpha")


@dataclass
class Beta:
    calls: list = field(default_factory=list, metadata={"cmd": "-"})

    def Run(self):
        self.calls.append("Beta")


@dataclass
class Broken:
    items: list = field(default_factory=list)


@dataclass
class Worker:
    name: str = field(default="", metadata={"cmd": "worker name"})
    cache: Decimal = field(default=None, metadata={"cmd": "-"})
    calls: list = field(default_factory=list, metadata={"cmd": "-"})

    def run(self):
        self.calls.append(self.name)


@dataclass
class Pending:
    total: int = field(init=False)


def makeFlagSet():
    stream = io.StringIO()
    console = Console(file=stream, width=120, color_system=None)
    return FlagSet("test", console=console, colorful=False), stream


class TestHappyPath(TestCase):
    """Behavioral tests for successful runs."""

    def testFlagsThenBehavior(self):
        test = Test()
        self.assertIsNone(commanderize(test, prompt="-bool=true -str=hello Test:Try"))
        self.assertEqual(test.calls, [("Try", True, "hello")])

    def testTokenListPrompt(self):
        test = Test()
        commanderize(test, prompt=["-int", "7", "-dur=1m30s", "test:try"])
        self.assertEqual(test.Int, 7)
        self.assertEqual(test.Dur, datetime.timedelta(seconds=90))
        self.assertEqual(len(test.calls), 1)

    def testDispatchScansEveryRecord(self):
        alpha, beta = Alpha(), Beta()
        commanderize(alpha, beta, prompt="Beta:Run")
        self.assertEqual(alpha.calls, [])
        self.assertEqual(beta.calls, ["Beta"])

    def testNamespacedOptions(self):
        test = Test()
        commanderize(BindingOptions(namespaced=True), test, prompt="-test.str=ns Test:Try")
        self.assertEqual(test.calls, [("Try", False, "ns")])

    def testDefaultsToSysArgv(self):
        test = Test()
        with patch("sys.argv", ["prog", "-str=argv", "Test:Try"]):
            commanderize(test)
        self.assertEqual(test.calls, [("Try", False, "argv")])

    def testExcludedTypeCheckingOnlyField(self):
        worker = Worker()
        commanderize(worker, prompt="-name=x Worker:Run")
        self.assertEqual(worker.calls, ["x"])

    def testLogsPhaseTransitions(self):
        with self.assertLogs("commandant.commander", "DEBUG") as logs:
            commanderize(Test(), prompt="Test:Try")
        output = "\n".join(logs.output)
        self.assertIn("idle -> constructing", output)
        self.assertIn("dispatching -> done", output)


class TestFaults(TestCase):
    """Behavioral tests for faults and the phase they abort in."""

    def testNotARecordAbortsBeforeBinding(self):
        flagset, _ = makeFlagSet()
        with self.assertRaises(NotARecordError) as context:
            commanderize(Test(), 42, prompt="Test:Try", flagset=flagset)
        self.assertEqual(context.exception.options["phase"], Phase.CONSTRUCTING)
        self.assertEqual(len(flagset), 0)

    def testUnsupportedFieldAbortsInBinding(self):
        test = Test()
        with self.assertRaises(UnsupportedFieldTypeError) as context:
            commanderize(Broken(), test, prompt="Test:Try")
        self.assertEqual(context.exception.options["phase"], Phase.BINDING)
        self.assertEqual(test.calls, [])

    def testUnsetFieldAbortsInBinding(self):
        with self.assertRaises(UnsetFieldError) as context:
            commanderize(Pending(), prompt="Pending:Run")
        self.assertEqual(context.exception.options["phase"], Phase.BINDING)

    def testUnknownFlagAbortsInParsing(self):
        test = Test()
        with self.assertRaises(UnknownFlagError) as context:
            commanderize(test, prompt="-nope Test:Try")
        self.assertEqual(context.exception.options["phase"], Phase.PARSING)
        self.assertEqual(test.calls, [])

    def testMissingCommandPrintsDefaults(self):
        flagset, stream = makeFlagSet()
        with self.assertRaises(MissingCommandArgumentError) as context:
            commanderize(Test(), prompt="", flagset=flagset)
        self.assertEqual(context.exception.options["phase"], Phase.PARSING)
        self.assertIn("-str string", stream.getvalue())
        self.assertIn("Test (string) var.", stream.getvalue())

    def testExtraPositionalsAreRejected(self):
        test = Test()
        with self.assertRaises(UnparsedArgumentsError) as context:
            commanderize(test, prompt="Test:Try -bool")
        self.assertEqual(context.exception.options["leftover"], ("-bool",))
        self.assertEqual(test.calls, [])

    def testMalformedTokenAbortsInMatching(self):
        with self.assertRaises(MalformedCommandTokenError) as context:
            commanderize(Test(), prompt="Test")
        self.assertEqual(context.exception.options["phase"], Phase.MATCHING)

    def testUnknownRecord(self):
        with self.assertRaises(CommandNotFoundError) as context:
            commanderize(Alpha(), Beta(), prompt="Gamma:Run")
        self.assertEqual(context.exception.options["phase"], Phase.MATCHING)

    def testUnknownMethodAbortsInDispatching(self):
        test = Test()
        with self.assertRaises(MethodNotFoundError) as context:
            commanderize(test, prompt="Test:Nope")
        self.assertEqual(context.exception.options["phase"], Phase.DISPATCHING)
        self.assertEqual(test.calls, [])

    def testBehaviorExceptionsAreNotTranslated(self):
        with self.assertRaisesRegex(RuntimeError, "behavior failed"):
            commanderize(Test(), prompt="Test:Fail")

    def testHelpRaisesOutsideShell(self):
        flagset, stream = makeFlagSet()
        with self.assertRaises(HelpRequestedError):
            commanderize(Test(), prompt="-h", flagset=flagset)
        self.assertIn("Usage of test:", stream.getvalue())

    def testRejectsBadArguments(self):
        with self.assertRaises(TypeError):
            commanderize(Test(), prompt=5)
        with self.assertRaises(TypeError):
            commanderize(Test(), prompt=["Test:Try", 1])
        with self.assertRaises(TypeError):
            commanderize(Test(), prompt="Test:Try", flagset=object())


class TestShellMode(TestCase):
    """Behavioral tests for shell-mode rendering and exit statuses."""

    def setUp(self):
        self.stream = io.StringIO()
        patcher = patch("commandant.faults.console", Console(file=self.stream, width=120, color_system=None))
        patcher.start()
        self.addCleanup(patcher.stop)

    def testFaultIsRenderedAndExits(self):
        with self.assertRaises(SystemExit) as context:
            commanderize(Test(), prompt="Test", shell=True, colorful=False)
        self.assertEqual(context.exception.code, 1)
        output = self.stream.getvalue()
        self.assertIn("Malformed Command", output)
        self.assertIn("usage: <record>:<method> (got: Test)", output)

    def testFancyRendering(self):
        with self.assertRaises(SystemExit):
            commanderize(Test(), prompt="Test:Nope", shell=True, fancy=True, colorful=False)
        self.assertIn("method <Nope> not found", self.stream.getvalue())

    def testHelpExitsSuccessfully(self):
        flagset, stream = makeFlagSet()
        with self.assertRaises(SystemExit) as context:
            commanderize(Test(), prompt="-help", flagset=flagset, shell=True)
        self.assertEqual(context.exception.code, 0)
        self.assertIn("Usage of test:", stream.getvalue())
        self.assertEqual(self.stream.getvalue(), "")

    def testSuccessDoesNotExit(self):
        test = Test()
        commanderize(test, prompt="Test:Try", shell=True)
        self.assertEqual(len(test.calls), 1)


if __name__ == "__main__":
    unittest.main()
