"""
Parser module behavioral tests (end-to-end parsing, aggregation, reassembly, faults).

Scope
- Validate scalar vs list aggregation and case-insensitive merging.
- Validate byte-for-byte restoration of nested expressions.
- Validate best-effort degradation and the faults collected on the way.
- Validate custom grammars and concurrent use.

Conventions
- Test method names follow CamelCase per project convention.
- Tests use the public API (parse, analyze, is_well_formed, ExpressionParser).
"""

from __future__ import annotations

import json
import time
import unittest
from concurrent.futures import ThreadPoolExecutor
from unittest import TestCase

from cliexpr import (
    CaseInsensitiveDict,
    DuplicateIdentifierWarning,
    EmptyIdentifierWarning,
    EmptyTemplateWarning,
    ExpressionParser,
    MissingTemplateWarning,
    Placeholders,
    SerializationWarning,
    UnbalancedExpressionWarning,
    aggregate,
    analyze,
    is_well_formed,
    parse,
    reassemble,
)


class TestParse(TestCase):
    """Behavioral tests for parse()."""

    def testScalarValue(self):
        self.assertEqual(parse("{{$ --Timeout:60000 }}")["Timeout"], "60000")

    def testRepeatedKeyGivesOrderedArray(self):
        self.assertEqual(json.loads(parse("{{$ --Tag:a --Tag:b --Tag:c }}")["Tag"]), ["a", "b", "c"])

    def testArrayIsCompactJson(self):
        self.assertEqual(parse("{{$ --Tag:a --Tag:b }}")["tag"], '["a","b"]')

    def testCaseInsensitiveMerge(self):
        arguments = parse("{{$ --Driver:A --driver:B }}")
        self.assertEqual(list(arguments), ["Driver"])
        self.assertEqual(json.loads(arguments["driver"]), ["A", "B"])

    def testResultIsCaseInsensitive(self):
        arguments = parse("{{$ --commandTimeout:100 }}")
        self.assertIsInstance(arguments, CaseInsensitiveDict)
        self.assertEqual(list(arguments), ["Commandtimeout"])
        self.assertEqual(arguments["COMMANDTIMEOUT"], "100")
        self.assertIn("commandtimeout", arguments)

    def testIdentifiersFollowUppercasedKeys(self):
        arguments = parse("{{$ --commandTimeout:1 --driverBinaries:. --firstMatch:x }}")
        self.assertEqual(list(arguments), ["Commandtimeout", "Driverbinaries", "Firstmatch"])
        self.assertEqual(arguments["firstMatch"], "x")

    def testEmptyInput(self):
        for text in ("", "no template here", None):
            with self.subTest(text=text):
                arguments = parse(text)
                self.assertEqual(len(arguments), 0)
                self.assertIsInstance(arguments, CaseInsensitiveDict)
                self.assertFalse(is_well_formed(text))

    def testEmptyResultKeepsCaseInsensitivity(self):
        arguments = parse("")
        arguments["Driver"] = "x"
        self.assertEqual(arguments["DRIVER"], "x")

    def testNonStringRejected(self):
        with self.assertRaises(TypeError):
            parse(42)

    def testAcronymKeys(self):
        self.assertEqual(list(parse("{{$ --HTTP Method:GET }}")), ["HttpMethod"])
        self.assertEqual(list(parse("{{$ --app9Name:x }}")), ["App9Name"])

    def testWhitespaceInKeys(self):
        self.assertEqual(
            list(parse("{{$ --HTTP\t\nMethod:GET }}")),
            list(parse("{{$ --HTTP Method:GET }}"))
        )

    def testFlagWithoutValue(self):
        arguments = parse("{{$ --Verbose --Level:3 }}")
        self.assertEqual(arguments["verbose"], "")
        self.assertEqual(arguments["level"], "3")

    def testValueIsUnprocessed(self):
        self.assertEqual(parse("{{$ --Name: John Doe --Age:3 }}")["name"], " John Doe")

    def testValueKeepsSeparators(self):
        arguments = parse("{{$ --driverBinaries:http://localhost:4444/wd/hub }}")
        self.assertEqual(arguments["DriverBinaries"], "http://localhost:4444/wd/hub")

    def testMultilineTemplate(self):
        arguments = parse("{{$\n  --a:1\n  --b:2\n}}")
        self.assertEqual(dict(arguments), {"A": "1", "B": "2"})

    def testNonAsciiValues(self):
        self.assertEqual(parse("{{$ --Name:Zoë --Name:Åsa }}")["name"], '["Zoë","Åsa"]')

    def testSurroundingTextIsIgnored(self):
        self.assertEqual(dict(parse("click on {{$ --Id:submit }} and wait")), {"Id": "submit"})


class TestNestedExpressions(TestCase):
    """Behavioral tests for nested expressions surviving the round trip."""

    def testBareNestedExpression(self):
        nested = "{{$ --Condition:{{$ --x:y }} --Value:1 }}"
        arguments = parse("{{$ --Driver:x --Rule:%s }}" % nested)
        self.assertEqual(arguments["rule"], nested)
        self.assertEqual(arguments["driver"], "x")

    def testNestedExpressionWithJsonCharacters(self):
        nested = r'{{$ --json:{"a":"b\c"} }}'
        self.assertEqual(parse("{{$ --Data:%s }}" % nested)["data"], nested)

    def testNestedExpressionWithNewlines(self):
        nested = "{{$\n --a:1\n --b:2\n}}"
        self.assertEqual(parse("{{$ --Data:%s }}" % nested)["data"], nested)

    def testSameNestedExpressionTwice(self):
        arguments = parse("{{$ --A:{{$ --x }} --B:{{$ --x }} }}")
        self.assertEqual(arguments["a"], "{{$ --x }}")
        self.assertEqual(arguments["b"], "{{$ --x }}")

    def testDistinctNestedExpressionsOnOneLine(self):
        arguments = parse("{{$ --A:{{$ --x:1 }} --B:{{$ --y:2 }} }}")
        self.assertEqual(arguments["a"], "{{$ --x:1 }}")
        self.assertEqual(arguments["b"], "{{$ --y:2 }}")

    def testNestedExpressionInRepeatedKey(self):
        arguments = parse("{{$ --Step:{{$ --a:1 }} --Step:plain }}")
        self.assertEqual(json.loads(arguments["step"]), ["{{$ --a:1 }}", "plain"])

    def testNestedExpressionInsideLargerValue(self):
        arguments = parse("{{$ --Text:before {{$ --a:1 }} after }}")
        self.assertEqual(arguments["text"], "before {{$ --a:1 }} after")

    def testNestedExpressionWithoutSurroundingSpace(self):
        arguments = parse("{{$ --Text:x{{$ --a:1 }}y }}")
        self.assertEqual(arguments["text"], "x{{$ --a:1 }}y")

    def testNestedExpressionAsArgument(self):
        outcome = analyze("{{$ --a:1 --{{$ --b:2 }} }}")
        self.assertEqual(outcome.tokens, ("a:1", "{{$ --b:2 }}"))

    def testManyNestedExpressionsScaleLinearly(self):
        count = 20000
        text = "{{$ %s }}" % " ".join("--K%d:{{$ --v:%d }}" % (i, i) for i in range(count))
        started = time.perf_counter()
        arguments = parse(text)
        elapsed = time.perf_counter() - started
        self.assertEqual(len(arguments), count)
        self.assertEqual(arguments["k0"], "{{$ --v:0 }}")
        self.assertEqual(arguments["k%d" % (count - 1)], "{{$ --v:%d }}" % (count - 1))
        self.assertLess(elapsed, 10.0)


class TestAnalyze(TestCase):
    """Behavioral tests for analyze() outcomes and collected faults."""

    def testOutcomeFields(self):
        outcome = analyze("{{$ --A:{{$ --x }} }}")
        self.assertEqual(outcome.template, "--A:{{$ --x }}")
        self.assertEqual(outcome.expressions, ("{{$ --x }}",))
        self.assertEqual(outcome.tokens, ("A:{{$ --x }}",))
        self.assertEqual(dict(outcome.arguments), {"A": "{{$ --x }}"})
        self.assertEqual(outcome.faults, ())

    def testMissingTemplate(self):
        outcome = analyze("{{$ --a:1")
        self.assertEqual(len(outcome.arguments), 0)
        self.assertEqual([type(fault) for fault in outcome.faults], [MissingTemplateWarning])

    def testBlankInputHasNoFaults(self):
        self.assertEqual(analyze("").faults, ())
        self.assertEqual(analyze("   ").faults, ())

    def testEmptyTemplate(self):
        outcome = analyze("{{$ }}")
        self.assertEqual(len(outcome.arguments), 0)
        self.assertEqual([type(fault) for fault in outcome.faults], [EmptyTemplateWarning])

    def testUnbalancedNestedExpression(self):
        outcome = analyze("{{$ --A:{{$ --x:1 --B:2 }}")
        self.assertIn(UnbalancedExpressionWarning, [type(fault) for fault in outcome.faults])
        self.assertEqual(dict(outcome.arguments), {"A": "{{$", "X": "1", "B": "2"})

    def testDuplicateIdentifier(self):
        outcome = analyze("{{$ --http-method:GET --httpmethod:POST }}")
        self.assertEqual(dict(outcome.arguments), {"Httpmethod": "POST"})
        self.assertEqual([type(fault) for fault in outcome.faults], [DuplicateIdentifierWarning])

    def testEmptyIdentifier(self):
        outcome = analyze("{{$ --:value }}")
        self.assertEqual(dict(outcome.arguments), {"": "value"})
        self.assertEqual([type(fault) for fault in outcome.faults], [EmptyIdentifierWarning])

    def testFaultsCarryCodes(self):
        fault, = analyze("plain text").faults
        self.assertEqual(fault.code.name, "MISSING_TEMPLATE")
        self.assertTrue(fault.options["hint"])


class TestAggregateAndReassemble(TestCase):
    """Behavioral tests for the aggregation and reassembly stages."""

    def testAggregate(self):
        self.assertEqual(aggregate(["a:1", "A:2", "b"]), {"A": ["1", "2"], "B": ""})

    def testAggregateNamesGroupsByUppercasedKey(self):
        self.assertEqual(list(aggregate(["commandTimeout:1", "COMMANDTIMEOUT:2"])), ["Commandtimeout"])
        self.assertEqual(list(aggregate(["HTTP Method:GET", "app9Name:x"])), ["HttpMethod", "App9Name"])

    def testAggregateKeepsFirstSeenOrder(self):
        self.assertEqual(list(aggregate(["b:1", "a:2", "B:3"])), ["B", "A"])

    def testReassembleRestoresPlaceholders(self):
        placeholders = Placeholders(["{{$ --x:1 }}"])
        placeholder = placeholders["{{$ --x:1 }}"]
        arguments = reassemble({"A": placeholder, "B": [placeholder, "y"]}, placeholders)
        self.assertEqual(arguments["a"], "{{$ --x:1 }}")
        self.assertEqual(json.loads(arguments["b"]), ["{{$ --x:1 }}", "y"])

    def testReassembleDegradesOnSerializationFailure(self):
        faults = []
        arguments = reassemble({"A": object()}, Placeholders(), faults=faults)
        self.assertEqual(len(arguments), 0)
        self.assertIsInstance(arguments, CaseInsensitiveDict)
        self.assertEqual([type(fault) for fault in faults], [SerializationWarning])


class TestExpressionParser(TestCase):
    """Behavioral tests for parser configuration and concurrent use."""

    def testCustomGrammar(self):
        class Dialect(ExpressionParser):
            opener = "<<"
            closer = ">>"
            delimiter = "/"
            separator = "="

        parser = Dialect()
        self.assertTrue(parser.is_well_formed("<< /a=1 >>"))
        self.assertFalse(parser.is_well_formed("{{$ --a:1 }}"))
        arguments = parser.parse("<< /name=x /rule=<< /b=2 >> >>")
        self.assertEqual(dict(arguments), {"Name": "x", "Rule": "<< /b=2 >>"})

    def testConcurrentParsing(self):
        expressions = ["{{$ --Index:%d --Nested:{{$ --n:%d }} }}" % (i, i) for i in range(200)]
        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(parse, expressions))
        for index, arguments in enumerate(results):
            self.assertEqual(arguments["index"], str(index))
            self.assertEqual(arguments["nested"], "{{$ --n:%d }}" % index)


if __name__ == "__main__":
    unittest.main()
