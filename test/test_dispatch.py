"""
Dispatch module behavioral tests (command token → behavior).

Scope
- Validate command token splitting and its malformed shapes.
- Validate record lookup across every registered record.
- Validate case-insensitive method resolution and execution.

Conventions
- Test method names follow CamelCase per project convention.
"""

from __future__ import annotations

import unittest
from dataclasses import dataclass, field
from unittest import TestCase

from commandant.dispatch import execute, find_command, resolve, split_token
from commandant.faults import CommandNotFoundError, MalformedCommandTokenError, MethodNotFoundError
from commandant.records import new_command


@dataclass
class Alpha:
    calls: list = field(default_factory=list, metadata={"cmd": "-"})

    def Try(self):
        self.calls.append("Try")

    def Fail(self):
        raise RuntimeError("boom")


@dataclass
class Beta:
    calls: list = field(default_factory=list, metadata={"cmd": "-"})

    def Run(self):
        self.calls.append("Run")


class TestSplitToken(TestCase):
    """Behavioral tests for split_token."""

    def testSplitsNameAndMethod(self):
        self.assertEqual(split_token("Alpha:Try"), ("Alpha", "Try"))
        self.assertEqual(split_token("a.b:c-d"), ("a.b", "c-d"))

    def testMalformedTokens(self):
        for token in ("Alpha", "Alpha:", ":Try", "a:b:c", "", ":"):
            with self.assertRaises(MalformedCommandTokenError, msg=token) as context:
                split_token(token)
            self.assertEqual(str(context.exception), "usage: <record>:<method> (got: %s)" % token)


class TestFindCommand(TestCase):
    """Behavioral tests for find_command."""

    def testScansEveryCommand(self):
        commands = [new_command(Alpha()), new_command(Beta())]
        self.assertIs(find_command(commands, "Beta"), commands[1])
        self.assertIs(find_command(commands, "alpha"), commands[0])

    def testFirstMatchWins(self):
        commands = [new_command(Beta()), new_command(Beta())]
        self.assertIs(find_command(commands, "beta"), commands[0])

    def testNotFoundSuggestsCloseNames(self):
        commands = [new_command(Alpha()), new_command(Beta())]
        with self.assertRaises(CommandNotFoundError) as context:
            find_command(commands, "Alpa")
        self.assertEqual(str(context.exception), "command <Alpa> not found")
        self.assertIn("Alpha", context.exception.options["suggestions"])

    def testNotFoundWithoutCommands(self):
        with self.assertRaises(CommandNotFoundError):
            find_command([], "Alpha")


class TestExecute(TestCase):
    """Behavioral tests for resolve and execute."""

    def testMethodNamesIgnoreCase(self):
        alpha = Alpha()
        command = new_command(alpha)
        for method in ("try", "TRY", "Try"):
            execute(command, method)
        self.assertEqual(alpha.calls, ["Try"] * 3)

    def testResolveReturnsBoundBehavior(self):
        beta = Beta()
        behavior = resolve(new_command(beta), "run")
        self.assertIs(behavior.__self__, beta)

    def testMethodNotFound(self):
        alpha = Alpha()
        with self.assertRaises(MethodNotFoundError) as context:
            execute(new_command(alpha), "Tyr")
        self.assertEqual(str(context.exception), "method <Tyr> not found")
        self.assertEqual(context.exception.options["method"], "Tyr")
        self.assertIn("try", context.exception.options["suggestions"])
        self.assertEqual(alpha.calls, [])

    def testBehaviorExceptionsPropagate(self):
        with self.assertRaisesRegex(RuntimeError, "boom"):
            execute(new_command(Alpha()), "fail")


if __name__ == "__main__":
    unittest.main()
