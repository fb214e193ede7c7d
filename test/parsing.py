"""
Parser behavioral tests (resolution, cardinality, flags, decoding, help).

Scope
- Validate command resolution (ids, aliases, first match wins, unknown names).
- Validate positional count checks and the faults they record.
- Validate flag classification, including all-or-nothing compound expansion.
- Validate positional decoding through parse and the result queries.

Conventions
- Test method names follow CamelCase per project convention.
- Parses run with quiet=True unless the rendered diagnostic is under test; the
  stderr console is captured with Console.capture().
"""

from __future__ import annotations

import sys
import unittest
from unittest import TestCase
from unittest.mock import patch

from typecmd import (
    command,
    parse,
    UInt8,
    ConversionError,
    FaultCode,
    NoCommandError,
    ShadowedCommandWarning,
    UnknownCommandError,
    UnmatchedCommandError,
    WrongArgumentCountError,
)
from typecmd import faults
from typecmd.parser import is_option
from typecmd.utils import Unset

help = command("help", "Print this help message")
schema = command("schema", "Print JTD")
keys = command("list", "List all available configuration keys", "[subkey]").with_args(str | None)
get = command("get", "Get configuration key", "<key> [-xyz]").with_args(str, str | None).with_options("x", "y", "z")
clear = command("clear", "Clear configuration key", "<key>").with_args(str).with_aliases("rm")
put = command("put", "Store key value", "<key> <value>").with_args(str, str)
subscribe = command("subscribe", "Subscribe to configuration key(s)", "<key...>").with_args(str, list[str])

commands = (help, schema, keys, get, clear, put, subscribe)


def run(*tokens, catalog=commands, **options):
    return parse(["bin", *tokens], catalog, quiet=True, **options)


class TestOptionPredicate(TestCase):
    """Classification of raw tokens into flags and positionals."""

    def testFlags(self):
        for token in ("-x", "-abc", "--verbose", "--x", "--1st", "-x-y"):
            with self.subTest(token=token):
                self.assertTrue(is_option(token))

    def testPositionals(self):
        for token in ("x", "-", "--", "-1", "-5.0", "-x y", "---x", "--_x", "--é", ""):
            with self.subTest(token=token):
                self.assertFalse(is_option(token))


class TestResolution(TestCase):
    """Command resolution and resolution faults."""

    def testEndToEndPut(self):
        result = run("put", "k", "v")
        self.assertTrue(result)
        self.assertTrue(result.is_(put))
        self.assertFalse(result.is_(get))
        self.assertEqual(result.get_args(put), ("k", "v"))
        self.assertEqual(result.index, commands.index(put))
        self.assertEqual(result.id, "put")
        self.assertIs(result.command, put)
        self.assertIsNone(result.fault)

    def testAlias(self):
        result = run("rm", "db.url")
        self.assertTrue(result.is_(clear))
        self.assertEqual(result.id, "clear")
        self.assertEqual(result.get_args(clear), ("db.url",))

    def testNoArguments(self):
        for argv in (["bin"], []):
            with self.subTest(argv=argv):
                result = parse(argv, commands, quiet=True)
                self.assertFalse(result)
                self.assertIsInstance(result.fault, NoCommandError)
                self.assertEqual(result.fault.options["code"], FaultCode.NO_COMMAND)
                self.assertEqual(result.help, parse(["bin", "help"], commands).help)
                for descriptor in commands:
                    self.assertFalse(result.is_(descriptor))

    def testUnknownCommand(self):
        result = run("pt", "k", "v")
        self.assertFalse(result)
        self.assertIsNone(result.index)
        self.assertIsNone(result.candidate)
        self.assertIsInstance(result.fault, UnknownCommandError)
        self.assertEqual(result.fault.options["token"], "pt")
        self.assertIn("put", result.fault.options["suggestions"])
        for descriptor in commands:
            self.assertFalse(result.is_(descriptor))

    def testUnknownCommandDiagnostic(self):
        with faults.console.capture() as capture:
            parse(["bin", "nope"], commands)
        output = capture.get()
        self.assertIn("unrecognized command 'nope'", output)
        self.assertIn(str(FaultCode.UNKNOWN_COMMAND.value), output)

    def testQuietSuppressesDiagnostics(self):
        with faults.console.capture() as capture:
            result = parse(["bin", "nope"], commands, quiet=True)
        self.assertEqual(capture.get(), "")
        self.assertIsInstance(result.fault, UnknownCommandError)

    def testCaseSensitive(self):
        self.assertIsInstance(run("PUT", "k", "v").fault, UnknownCommandError)

    def testFirstMatchWins(self):
        first = command("get", "first").with_args(str)
        second = command("get", "second").with_args(str, str)
        with self.assertWarns(ShadowedCommandWarning):
            result = run("get", "k", catalog=(first, second))
        self.assertEqual(result.index, 0)
        self.assertEqual(result.get_args(first), ("k",))
        with self.assertRaises(UnmatchedCommandError):
            result.get_args(second)

    def testShadowedAlias(self):
        with self.assertWarns(ShadowedCommandWarning) as context:
            run("help", catalog=(clear, command("remove", "Remove").with_aliases("rm")))
        self.assertEqual(context.warning.options["name"], "rm")
        self.assertEqual(context.warning.options["code"], FaultCode.SHADOWED_COMMAND)

    def testStringVector(self):
        result = parse("bin put key 'a value'", commands, quiet=True)
        self.assertEqual(result.get_args(put), ("key", "a value"))
        self.assertEqual(result.prog, "bin")

    def testSystemVector(self):
        with patch.object(sys, "argv", ["bin", "clear", "k"]):
            result = parse(commands=commands, quiet=True)
        self.assertTrue(result.is_(clear))

    def testDefaultVector(self):
        with patch.object(sys, "argv", ["bin", "schema"]):
            result = parse(Unset, commands, quiet=True)
        self.assertTrue(result.is_(schema))

    def testRejectsBadInput(self):
        with self.assertRaises(TypeError):
            parse(["bin", 1], commands)
        with self.assertRaises(TypeError):
            parse(["bin", "put"], ["put"])

    def testIdempotent(self):
        argv = ["bin", "get", "k", "-xy", "--nope", "extra"]
        one, two = parse(argv, commands, quiet=True), parse(argv, commands, quiet=True)
        self.assertEqual(one.id, two.id)
        self.assertEqual(one.options, two.options)
        self.assertEqual(one.unknown_options, two.unknown_options)
        self.assertEqual(one.get_args(get), two.get_args(get))
        self.assertEqual(one.help, two.help)


class TestCardinality(TestCase):
    """Positional count checks."""

    def testTooFew(self):
        result = run("put", "k", "-x")
        self.assertFalse(result)
        self.assertFalse(result.is_(put))
        self.assertIs(result.candidate, put)
        self.assertIsInstance(result.fault, WrongArgumentCountError)
        self.assertEqual(result.fault.options["code"], FaultCode.TOO_FEW_ARGUMENTS)
        self.assertEqual(result.fault.options["tokens"], ("k",))
        self.assertIn("at least 2", result.fault.message)
        self.assertEqual(result.options, frozenset())
        self.assertEqual(result.unknown_options, frozenset())
        with self.assertRaises(UnmatchedCommandError):
            result.get_args(put)

    def testTooMany(self):
        result = run("clear", "a", "b")
        self.assertIsInstance(result.fault, WrongArgumentCountError)
        self.assertEqual(result.fault.options["code"], FaultCode.TOO_MANY_ARGUMENTS)
        self.assertIn("at most 1", result.fault.message)
        self.assertIn("'a' 'b'", result.fault.message)

    def testNoArgumentCommandRejectsPositionals(self):
        self.assertIsInstance(run("schema", "x").fault, WrongArgumentCountError)
        self.assertTrue(run("schema").is_(schema))
        self.assertEqual(run("schema").get_args(schema), ())

    def testDiagnosticNamesCommand(self):
        with faults.console.capture() as capture:
            parse(["bin", "put", "k"], commands)
        output = capture.get()
        self.assertIn("'put'", output)
        self.assertIn("Store key value", output)


class TestFlags(TestCase):
    """Flag classification against the matched command's vocabulary."""

    def setUp(self):
        self.tool = command("tool", "Tool").with_options("a", "b", "c", "--verbose")
        self.other = command("other", "Other").with_options("x")
        self.catalog = (self.tool, self.other)

    def testCompound(self):
        result = run("tool", "-abc", catalog=self.catalog)
        self.assertEqual(result.options, frozenset("abc"))
        self.assertEqual(result.unknown_options, frozenset())

    def testCompoundIsAllOrNothing(self):
        result = run("tool", "-abcd", catalog=self.catalog)
        self.assertEqual(result.options, frozenset())
        self.assertEqual(result.unknown_options, frozenset({"abcd"}))

    def testLongNames(self):
        result = run("tool", "--verbose", "-verbose", "--a", catalog=self.catalog)
        self.assertEqual(result.options, frozenset({"verbose", "a"}))
        self.assertTrue(result.has_option("--verbose"))
        self.assertTrue(result.has_option("verbose"))
        self.assertTrue(result.has_option("-a"))
        self.assertFalse(result.has_option("b"))

    def testOnlyMatchedVocabulary(self):
        bare = command("bare", "No flags")
        result = run("bare", "-x", catalog=(bare, self.other))
        self.assertEqual(result.unknown_options, frozenset({"x"}))
        self.assertFalse(result.has_option("x"))

    def testFlagsAreNotPositionals(self):
        result = run("get", "-z", "key", "--zq", "sub")
        self.assertEqual(result.get_args(get), ("key", "sub"))
        self.assertEqual(result.options, frozenset({"z"}))
        self.assertEqual(result.unknown_options, frozenset({"zq"}))

    def testNegativeNumbersArePositionals(self):
        offset = command("offset", "Offset").with_args(int, float)
        result = run("offset", "-5", "-0.5", catalog=(offset,))
        self.assertEqual(result.get_args(offset), (-5, -0.5))
        self.assertEqual(result.unknown_options, frozenset())


class TestDecoding(TestCase):
    """Positional decoding through parse."""

    def testOptionalAbsence(self):
        pair = command("pair", "Pair").with_args(str | None, str | None)
        self.assertEqual(run("pair", catalog=(pair,)).get_args(pair), (None, None))
        self.assertEqual(run("pair", "a", catalog=(pair,)).get_args(pair), ("a", None))
        self.assertEqual(run("list").get_args(keys), (None,))

    def testVariadicGreed(self):
        self.assertEqual(run("subscribe", "m", "x", "y").get_args(subscribe), ("m", ["x", "y"]))
        self.assertEqual(run("subscribe", "m").get_args(subscribe), ("m", []))

    def testArgsAreCopies(self):
        result = run("subscribe", "m", "x")
        result.get_args(subscribe)[1].append("y")
        self.assertEqual(result.get_args(subscribe), ("m", ["x"]))

    def testBooleanGrammar(self):
        switch = command("switch", "Switch").with_args(list[bool])
        result = run("switch", "TRUE", "YeS", "1", "on", "false", "no", "random", catalog=(switch,))
        self.assertEqual(result.get_args(switch), ([True, True, True, True, False, False, False],))

    def testRoundTrip(self):
        values = ("alpha", "beta", "gamma")
        triple = command("triple", "Triple").with_args(str, str, str)
        self.assertEqual(run("triple", *values, catalog=(triple,)).get_args(triple), values)
        numbers = command("numbers", "Numbers").with_args(int, UInt8, float)
        self.assertEqual(run("numbers", "-3", "200", "1.25", catalog=(numbers,)).get_args(numbers), (-3, 200, 1.25))

    def testConversionFailurePropagates(self):
        numbers = command("numbers", "Numbers").with_args(str, UInt8)
        with self.assertRaises(ConversionError) as context:
            run("numbers", "k", "300", catalog=(numbers,))
        self.assertIsInstance(context.exception, ValueError)
        self.assertEqual(context.exception.options["position"], 2)
        self.assertEqual(context.exception.options["token"], "300")

    def testUnderscoredIntegerIsRejected(self):
        numbers = command("numbers", "Numbers").with_args(UInt8)
        with self.assertRaises(ConversionError) as context:
            run("numbers", "1_0", catalog=(numbers,))
        self.assertEqual(context.exception.options["token"], "1_0")

    def testBuiltinSubclassKinds(self):
        class Host(str):
            pass

        class Port(int):
            pass

        connect = command("connect", "Connect", "<host> <port>").with_args(Host, Port)
        host, port = run("connect", "db.local", "8080", catalog=(connect,)).get_args(connect)
        self.assertIsInstance(host, Host)
        self.assertIsInstance(port, Port)
        self.assertEqual((host, port), ("db.local", 8080))

    def testUnregisteredCommand(self):
        result = run("put", "k", "v")
        with self.assertRaises(UnmatchedCommandError):
            result.get_args(command("put", "Another put").with_args(str, str))
        with self.assertRaises(AssertionError):
            result.get_args(get)

    def testEqualCommandFindsSlot(self):
        result = run("put", "k", "v")
        twin = command("put", "Store key value", "<key> <value>").with_args(str, str)
        self.assertEqual(result.get_args(twin), ("k", "v"))


class TestHelp(TestCase):
    """Help listing format."""

    def testAlignment(self):
        catalog = (
            command("get", "Get configuration key", "<key>"),
            command("all", "Print all"),
        )
        self.assertEqual(
            parse(["bin"], catalog, quiet=True).help,
            " get <key> Get configuration key\n"
            " all       Print all\n"
        )

    def testWideCharacters(self):
        catalog = (
            command("取得", "Get"),
            command("list", "List"),
        )
        self.assertEqual(
            parse(["bin"], catalog, quiet=True).help,
            " 取得  Get\n"
            " list  List\n"
        )

    def testEmptyCatalog(self):
        result = parse(["bin", "anything"], (), quiet=True)
        self.assertEqual(result.help, "")
        self.assertIsInstance(result.fault, UnknownCommandError)

    def testListsEveryCommand(self):
        listing = run("put", "k", "v").help.splitlines()
        self.assertEqual(len(listing), len(commands))
        for line, descriptor in zip(listing, commands):
            self.assertTrue(line.startswith(" %s " % descriptor.id))
            self.assertTrue(line.endswith(descriptor.description))


if __name__ == "__main__":
    unittest.main()
