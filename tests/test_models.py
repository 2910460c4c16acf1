"""Tests for the value types."""

import unittest

from restapi_trust.models import (
    Certificate,
    DiscoveredTrust,
    OverrideSet,
    ValidationOutcome,
    VerificationPolicy,
)
from restapi_trust.utils import colon_hex


class TestOverrideSet(unittest.TestCase):

    def test_vocabulary_order_regardless_of_input_order(self):
        s = OverrideSet.of("tls_server_discover_rootca", "force_creation", "tls_server_insecure")
        self.assertEqual(
            s.names, ("force_creation", "tls_server_insecure", "tls_server_discover_rootca")
        )

    def test_duplicates_collapse(self):
        self.assertEqual(len(OverrideSet.of("force_creation", "force_creation")), 1)

    def test_unknown_name(self):
        with self.assertRaises(ValueError):
            OverrideSet.of("tls_server_yolo")

    def test_membership_and_order(self):
        s = OverrideSet.of("tls_server_accept_cn", "force_creation")
        self.assertIn("force_creation", s)
        self.assertNotIn("tls_server_insecure", s)
        self.assertEqual(s.ordered(), [(0, "force_creation"), (1, "tls_server_accept_cn")])

    def test_with(self):
        s = OverrideSet.of("tls_server_insecure").with_("force_creation")
        self.assertEqual(s.names, ("force_creation", "tls_server_insecure"))

    def test_equality(self):
        self.assertEqual(OverrideSet.of("force_creation"), OverrideSet(("force_creation",)))
        self.assertEqual(OverrideSet(), OverrideSet.of())


class TestCertificate(unittest.TestCase):

    def test_self_signed_compares_cns(self):
        self.assertTrue(Certificate(der=b"x", subject_cn="A", issuer_cn="A").is_self_signed)
        self.assertFalse(Certificate(der=b"x", subject_cn="A", issuer_cn="B").is_self_signed)

    def test_missing_cns_count_as_self_signed(self):
        self.assertTrue(Certificate(der=b"x", subject_cn="", issuer_cn="").is_self_signed)


class TestVerificationPolicy(unittest.TestCase):

    def test_insecure(self):
        p = VerificationPolicy.insecure()
        self.assertFalse(p.verify_peer)
        self.assertFalse(p.verify_peer_name)
        self.assertFalse(p.capture_chain)

    def test_capture(self):
        p = VerificationPolicy.capture()
        self.assertFalse(p.verify_peer)
        self.assertTrue(p.capture_chain)

    def test_secure_defaults_to_full_verification(self):
        p = VerificationPolicy.secure()
        self.assertTrue(p.verify_peer)
        self.assertTrue(p.verify_peer_name)
        self.assertEqual(p.trusted_roots, ())

    def test_secure_with_expected_cn_skips_name_check(self):
        p = VerificationPolicy.secure(expected_cn="internal", trusted_roots=[b"root"])
        self.assertTrue(p.verify_peer)
        self.assertFalse(p.verify_peer_name)
        self.assertEqual(p.trusted_roots, (b"root",))


class TestValidationOutcome(unittest.TestCase):

    def test_to_dict_rejected(self):
        outcome = ValidationOutcome(
            accepted=False,
            errors=("boom",),
            required_overrides=OverrideSet.of("force_creation", "tls_server_insecure"),
        )
        self.assertEqual(
            outcome.to_dict(),
            {
                "accepted": False,
                "errors": ["boom"],
                "required_overrides": [
                    {"name": "force_creation", "order": 0},
                    {"name": "tls_server_insecure", "order": 1},
                ],
                "discovered": None,
                "trusted_root_pem": None,
                "accepted_cn": None,
            },
        )

    def test_to_dict_discovered(self):
        root = Certificate(der=b"\x01\x02", subject_cn="Root", issuer_cn="Root")
        d = ValidationOutcome(
            accepted=True,
            discovered=DiscoveredTrust(leaf_cn="api", leaf_issuer_cn="Root", root=root),
        ).to_dict()["discovered"]
        self.assertEqual(d["root_cn"], "Root")
        self.assertEqual(d["root_sha256"], colon_hex(root.sha256))
        self.assertTrue(d["root_pem"].startswith("-----BEGIN CERTIFICATE-----"))


class TestColonHex(unittest.TestCase):

    def test_format(self):
        self.assertEqual(colon_hex("ab12cd"), "AB:12:CD")


if __name__ == "__main__":
    unittest.main()
