import unittest
from types import SimpleNamespace

from zcap_invoke.capability import (
    ById,
    Embedded,
    Root,
    check_parameter,
    format_capability_invocation,
    parse_capability_invocation,
    resolve_capability,
)
from zcap_invoke.error import ValidationError

URL = "https://www.test.org/read/foo"


class TestResolveCapability(unittest.TestCase):
    def test_root(self):
        ref = resolve_capability(None, URL)
        self.assertEqual(ref, Root(URL))
        self.assertEqual(
            ref.id, "urn:zcap:root:https%3A%2F%2Fwww.test.org%2Fread%2Ffoo"
        )

    def test_root_without_url(self):
        with self.assertRaises(ValidationError):
            resolve_capability(None, None)

    def test_by_id(self):
        ref = resolve_capability("urn:uuid:1234", URL)
        self.assertEqual(ref, ById("urn:uuid:1234"))
        self.assertEqual(ref.id, "urn:uuid:1234")

    def test_embedded(self):
        capability = {
            "id": "urn:uuid:1234",
            "controller": "did:key:foo",
            "invocationTarget": URL,
        }
        self.assertEqual(resolve_capability(capability, URL), Embedded("urn:uuid:1234"))
        self.assertEqual(
            resolve_capability(SimpleNamespace(id="urn:uuid:1234"), URL),
            Embedded("urn:uuid:1234"),
        )

    def test_invalid(self):
        for capability in ("", 42, {"id": 42}, {}, SimpleNamespace(name="x")):
            with self.assertRaises(ValidationError):
                resolve_capability(capability, URL)

    def test_non_printable_ascii(self):
        for capability in ("urn:caf\u00e9", "urn:a\tb", {"id": "urn:\u00e9"}):
            with self.assertRaisesRegex(ValidationError, "printable ASCII"):
                resolve_capability(capability, URL)
        check_parameter("capability", "urn:uuid:1 2")


class TestCapabilityInvocationHeader(unittest.TestCase):
    def test_format(self):
        self.assertEqual(
            format_capability_invocation("test", "read"),
            'zcap id="test", action="read"',
        )
        self.assertEqual(format_capability_invocation("test"), 'zcap id="test"')

    def test_format_escapes(self):
        value = format_capability_invocation('a"b')
        self.assertEqual(value, 'zcap id="a\\"b"')
        self.assertEqual(parse_capability_invocation(value), {"id": 'a"b'})

    def test_parse(self):
        self.assertEqual(
            parse_capability_invocation(
                'zcap id="test", action="read", invoker="did:key:foo"'
            ),
            {"id": "test", "action": "read", "invoker": "did:key:foo"},
        )

    def test_parse_invalid(self):
        with self.assertRaisesRegex(ValueError, "unsupported capability invocation"):
            parse_capability_invocation('Bearer id="test"')
        with self.assertRaisesRegex(ValueError, "missing an id"):
            parse_capability_invocation('zcap action="read"')
