"""
Tests for artifact classification.
"""

import unittest

from ioc_pivot.classify import (
    UNRECOGNIZED,
    classify,
    classify_lines,
    detect_type,
    is_ipv4,
    is_ipv6,
    suggestion_for,
)
from ioc_pivot.models import Classification

SHA256_EMPTY = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


class TestClassifyIPv4(unittest.TestCase):
    def test_valid_addresses(self):
        for value in ["8.8.8.8", "0.0.0.0", "255.255.255.255", "192.168.1.1", "10.0.0.254"]:
            with self.subTest(value=value):
                self.assertEqual(classify(value), Classification.valid("ip"))

    def test_leading_zero_rejected(self):
        result = classify("192.168.01.1")
        self.assertNotEqual(result.type, "ip")
        self.assertFalse(is_ipv4("192.168.01.1"))
        self.assertFalse(is_ipv4("001.2.3.4"))

    def test_out_of_range_rejected(self):
        self.assertFalse(is_ipv4("256.1.1.1"))
        self.assertFalse(is_ipv4("1.2.3"))
        self.assertFalse(is_ipv4("1.2.3.4.5"))
        self.assertFalse(is_ipv4("1.2.3.-4"))
        self.assertFalse(is_ipv4("1.2..4"))

    def test_whitespace_trimmed(self):
        self.assertEqual(classify("  1.1.1.1 \n").type, "ip")


class TestClassifyIPv6(unittest.TestCase):
    def test_full_and_compressed_forms(self):
        for value in [
            "2001:0db8:85a3:0000:0000:8a2e:0370:7334",
            "2001:db8::1",
            "::1",
            "fe80::",
            "::",
        ]:
            with self.subTest(value=value):
                self.assertTrue(is_ipv6(value))
                self.assertEqual(classify(value).type, "ip")

    def test_non_hex_rejected(self):
        self.assertFalse(is_ipv6("2001:db8::g1"))
        self.assertFalse(is_ipv6("abcdef"))

    def test_too_few_groups_rejected(self):
        self.assertFalse(is_ipv6("ab:cd"))


class TestClassifySha256(unittest.TestCase):
    def test_exact_64_hex(self):
        self.assertEqual(classify(SHA256_EMPTY), Classification.valid("sha256"))
        self.assertEqual(classify(SHA256_EMPTY.upper()).type, "sha256")

    def test_63_and_65_chars_are_not_sha256(self):
        self.assertNotEqual(classify(SHA256_EMPTY[:-1]).type, "sha256")
        self.assertNotEqual(classify(SHA256_EMPTY + "a").type, "sha256")

    def test_all_digit_64_chars_is_sha256_not_asn(self):
        self.assertEqual(classify("1" * 64).type, "sha256")


class TestClassifyAsn(unittest.TestCase):
    def test_prefixed_and_bare(self):
        self.assertEqual(classify("AS15169"), Classification.valid("asn"))
        self.assertEqual(classify("15169"), Classification.valid("asn"))
        self.assertEqual(classify("as13335").type, "asn")

    def test_digit_limit(self):
        self.assertEqual(classify("1234567890").type, "asn")
        self.assertFalse(classify("12345678901").is_valid)
        self.assertFalse(classify("AS").is_valid)


class TestClassifyMailAndDomain(unittest.TestCase):
    def test_email(self):
        self.assertEqual(classify("user@example.com"), Classification.valid("mail"))

    def test_email_with_many_dots_is_not_domain(self):
        self.assertEqual(classify("first.last@mail.sub.example.co.uk").type, "mail")

    def test_double_at_rejected(self):
        self.assertFalse(classify("a@b@example.com").is_valid)

    def test_domain(self):
        self.assertEqual(classify("example.com"), Classification.valid("domain"))
        self.assertEqual(classify("sub-1.example.co.uk").type, "domain")

    def test_domain_label_rules(self):
        self.assertFalse(classify("-bad.example.com").is_valid)
        self.assertFalse(classify("bad-.example.com").is_valid)
        self.assertFalse(classify("example.c0m").is_valid)
        self.assertFalse(classify("example.c").is_valid)
        self.assertFalse(classify(("a" * 64) + ".com").is_valid)
        self.assertTrue(classify(("a" * 63) + ".com").is_valid)

    def test_single_label_is_not_domain(self):
        self.assertIsNone(detect_type("localhost"))


class TestClassifyOutcomes(unittest.TestCase):
    def test_empty(self):
        self.assertEqual(classify(""), Classification.empty())
        self.assertEqual(classify("   \t\n").status, "empty")
        self.assertIsNone(classify("").type)

    def test_invalid_reason(self):
        result = classify("not an indicator")
        self.assertEqual(result.status, "invalid")
        self.assertEqual(result.reason, UNRECOGNIZED)
        self.assertIsNone(result.type)

    def test_deterministic(self):
        self.assertEqual(classify("example.com"), classify("example.com"))

    def test_str(self):
        self.assertEqual(str(classify("8.8.8.8")), "valid ip")
        self.assertEqual(str(classify("")), "empty")
        self.assertEqual(str(classify("???")), f"invalid: {UNRECOGNIZED}")


class TestClassifyLines(unittest.TestCase):
    def test_drops_blank_lines_and_trims(self):
        results = classify_lines("8.8.8.8\n\n   \n  example.com  \nnope")
        self.assertEqual([v for v, _ in results], ["8.8.8.8", "example.com", "nope"])
        self.assertEqual([o.is_valid for _, o in results], [True, True, False])


class TestSuggestion(unittest.TestCase):
    def test_blank_has_no_suggestion(self):
        self.assertIsNone(suggestion_for("  "))

    def test_dotted_text(self):
        self.assertEqual(suggestion_for("192.168.01.1"), "may be a domain or IP")

    def test_hash_length(self):
        self.assertEqual(suggestion_for("a" * 63), "SHA-256 must be exactly 64 characters")

    def test_short_asn(self):
        self.assertEqual(suggestion_for("asx"), "ASN must look like AS12345 or 12345")


if __name__ == "__main__":
    unittest.main()
