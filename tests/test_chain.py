"""Tests for certificate chain inspection."""

import tempfile
import unittest

from restapi_trust.chain import build_chain, inspect_chain
from restapi_trust.errors import CertificateChainError
from restapi_trust.models import CertificateChain, Endpoint

from tls_fixtures import LoopbackServer, TLSServer, closed_port, der, make_ca, make_leaf, write_identity


class TestBuildChain(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.root = make_ca("B")
        cls.leaf = make_leaf("A", issuer=cls.root)
        cls.other_root = make_ca("C")
        cls.intermediate = make_ca("B", issuer=cls.other_root)

    def test_self_signed_last_certificate_is_root(self):
        chain = build_chain([der(self.leaf[0]), der(self.root[0])])
        self.assertEqual((chain.leaf.subject_cn, chain.leaf.issuer_cn), ("A", "B"))
        self.assertIsNotNone(chain.root)
        self.assertEqual(chain.root.subject_cn, "B")
        self.assertEqual(chain.root.der, der(self.root[0]))

    def test_non_self_signed_last_certificate_is_dropped(self):
        chain = build_chain([der(self.leaf[0]), der(self.intermediate[0])])
        self.assertIsNone(chain.root)

    def test_single_certificate_has_no_root(self):
        leaf = make_leaf("solo")
        chain = build_chain([der(leaf[0])])
        self.assertTrue(chain.leaf.is_self_signed)
        self.assertIsNone(chain.root)

    def test_root_is_taken_from_the_end(self):
        chain = build_chain([der(self.leaf[0]), der(self.intermediate[0]), der(self.other_root[0])])
        self.assertEqual(chain.root.subject_cn, "C")

    def test_empty_chain(self):
        with self.assertRaises(ValueError):
            build_chain([])

    def test_garbage(self):
        with self.assertRaises(ValueError):
            build_chain([b"not a certificate"])


class TestInspectChain(unittest.TestCase):

    @classmethod
    def setUpClass(cls):
        cls.tmp = tempfile.TemporaryDirectory()
        root = make_ca("Test Root CA")
        leaf = make_leaf("localhost", issuer=root)
        cls.root_der = der(root[0])
        cls.certfile, cls.keyfile = write_identity(cls.tmp.name, [leaf[0], root[0]], leaf[1])

    @classmethod
    def tearDownClass(cls):
        cls.tmp.cleanup()

    def test_captures_presented_chain(self):
        with TLSServer(self.certfile, self.keyfile) as server:
            chain = inspect_chain(Endpoint("127.0.0.1", server.port, "https"), timeout=5)
        self.assertIsInstance(chain, CertificateChain)
        self.assertEqual(chain.leaf.subject_cn, "localhost")
        self.assertEqual(chain.leaf.issuer_cn, "Test Root CA")
        self.assertEqual(chain.root.der, self.root_der)

    def test_handshake_failure(self):
        with LoopbackServer() as server:
            result = inspect_chain(Endpoint("127.0.0.1", server.port, "https"), timeout=5)
        self.assertIsInstance(result, CertificateChainError)
        self.assertIn("127.0.0.1", result.message)

    def test_connection_refused(self):
        result = inspect_chain(Endpoint("127.0.0.1", closed_port(), "https"), timeout=5)
        self.assertIsInstance(result, CertificateChainError)


if __name__ == "__main__":
    unittest.main()
