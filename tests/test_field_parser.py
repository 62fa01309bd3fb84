# tests/test_field_parser.py

"""Tests for structured product field parsing."""

import json
import unittest
from typing import Any

from productlens.extraction.dom import parse_html
from productlens.extraction.field_parser import (
    StructuredFieldParser,
    detect_currency_symbol,
    parse_count_value,
    parse_currency_code,
    parse_price_field,
    parse_price_text,
    parse_price_value,
    parse_rating_field,
    parse_rating_text,
    parse_rating_value,
    parse_review_count_text,
)


def _json_ld_page(payload: Any, body: str = "") -> str:
    """Wrap a JSON-LD payload in a minimal HTML page."""
    return (
        "<html><head>"
        '<script type="application/ld+json">'
        f"{json.dumps(payload)}</script>"
        f"</head><body>{body}</body></html>"
    )


_WIDGET = {
    "@type": "Product",
    "name": "Widget",
    "offers": {"price": "19.99", "priceCurrency": "USD"},
}


class TestPriceText(unittest.TestCase):
    """parse_price_text free-text patterns."""

    def test_thousands_separator(self) -> None:
        self.assertEqual(parse_price_text("$1,234.56"), 1234.56)

    def test_label_prefix(self) -> None:
        self.assertEqual(parse_price_text("price: $50"), 50.0)
        self.assertEqual(parse_price_text("Cost: 75"), 75.0)

    def test_symbol_suffix(self) -> None:
        self.assertEqual(parse_price_text("Nur 19.99 € heute"), 19.99)

    def test_no_number(self) -> None:
        self.assertIsNone(parse_price_text("Call us for pricing"))

    def test_out_of_range_skipped(self) -> None:
        self.assertIsNone(parse_price_text("$0 down"))
        self.assertEqual(parse_price_text("$0 down, then $25"), 25.0)

    def test_plain_number_without_context_ignored(self) -> None:
        self.assertIsNone(parse_price_text("Model 3000 in stock"))

    def test_earliest_match_wins_across_patterns(self) -> None:
        self.assertEqual(parse_price_text("Only 20 € today, was $30"), 20.0)
        self.assertEqual(parse_price_text("Price: 40, sale $35"), 40.0)


class TestRatingAndReviews(unittest.TestCase):
    """parse_rating_text and parse_review_count_text."""

    def test_out_of_five(self) -> None:
        self.assertEqual(parse_rating_text("4.5 out of 5"), 4.5)

    def test_stars(self) -> None:
        self.assertEqual(parse_rating_text("Rated 4 stars"), 4.0)

    def test_rating_label(self) -> None:
        self.assertEqual(parse_rating_text("Rating: 3.8"), 3.8)

    def test_out_of_range_rating(self) -> None:
        self.assertIsNone(parse_rating_text("9 stars"))

    def test_review_count_parenthesised(self) -> None:
        self.assertEqual(parse_review_count_text("(1,234 reviews)"), 1234)

    def test_review_count_ratings(self) -> None:
        self.assertEqual(parse_review_count_text("856 ratings"), 856)

    def test_zero_reviews(self) -> None:
        self.assertIsNone(parse_review_count_text("0 reviews"))


class TestValueParsers(unittest.TestCase):
    """Value parsers for JSON-LD and selector content."""

    def test_price_value(self) -> None:
        self.assertEqual(parse_price_value("1,299.00"), 1299.0)
        self.assertEqual(parse_price_value(42), 42.0)
        self.assertIsNone(parse_price_value(0))
        self.assertIsNone(parse_price_value(True))
        self.assertIsNone(parse_price_value("free"))
        self.assertIsNone(parse_price_value(20_000_000))

    def test_rating_value(self) -> None:
        self.assertEqual(parse_rating_value("4.7"), 4.7)
        self.assertEqual(parse_rating_value(0), 0.0)
        self.assertIsNone(parse_rating_value(7))

    def test_count_value(self) -> None:
        self.assertEqual(parse_count_value("1,234"), 1234)
        self.assertEqual(parse_count_value(15), 15)
        self.assertIsNone(parse_count_value("none"))
        self.assertIsNone(parse_count_value(0))

    def test_price_field(self) -> None:
        self.assertEqual(parse_price_field("49.99"), 49.99)
        self.assertEqual(parse_price_field("EUR 1,299.00"), 1299.0)
        self.assertEqual(parse_price_field("Save 15% now $85.00"), 85.0)
        self.assertIsNone(parse_price_field("Save 15%"))

    def test_rating_field(self) -> None:
        self.assertEqual(parse_rating_field(" 4.7 "), 4.7)
        self.assertEqual(parse_rating_field("(88 reviews) 3.9 stars"), 3.9)
        self.assertIsNone(parse_rating_field("1,234 ratings"))
        self.assertIsNone(parse_rating_field("1,234"))

    def test_currency_code(self) -> None:
        self.assertEqual(parse_currency_code(" eur "), "EUR")
        self.assertIsNone(parse_currency_code("euro"))
        self.assertIsNone(parse_currency_code(None))

    def test_symbol_priority(self) -> None:
        """$ is checked before €."""
        self.assertEqual(detect_currency_symbol("€5 or $6"), "USD")
        self.assertEqual(detect_currency_symbol("₹ 499"), "INR")
        self.assertIsNone(detect_currency_symbol("499"))


class TestJsonLdFields(unittest.TestCase):
    """JSON-LD takes priority over every other source."""

    def test_widget_example(self) -> None:
        soup = parse_html(_json_ld_page(_WIDGET))
        self.assertEqual(StructuredFieldParser.extract_title(soup), "Widget")
        self.assertEqual(StructuredFieldParser.extract_price(soup), 19.99)
        self.assertEqual(StructuredFieldParser.extract_currency(soup), "USD")

    def test_json_ld_beats_selectors(self) -> None:
        body = '<h1>Other Name</h1><span class="price">$5.00</span>'
        soup = parse_html(_json_ld_page(_WIDGET, body))
        self.assertEqual(StructuredFieldParser.extract_title(soup), "Widget")
        self.assertEqual(StructuredFieldParser.extract_price(soup), 19.99)

    def test_array_payload(self) -> None:
        payload = [{"@type": "BreadcrumbList"}, _WIDGET]
        soup = parse_html(_json_ld_page(payload))
        self.assertEqual(StructuredFieldParser.extract_title(soup), "Widget")

    def test_offer_list_and_rating(self) -> None:
        payload = {
            "@type": "Product",
            "name": "Gadget",
            "offers": [{"price": 49, "priceCurrency": "gbp"}],
            "aggregateRating": {"ratingValue": "4.2", "ratingCount": "87"},
        }
        soup = parse_html(_json_ld_page(payload))
        self.assertEqual(StructuredFieldParser.extract_price(soup), 49.0)
        self.assertEqual(StructuredFieldParser.extract_currency(soup), "GBP")
        self.assertEqual(StructuredFieldParser.extract_rating(soup), 4.2)
        self.assertEqual(StructuredFieldParser.extract_review_count(soup), 87)

    def test_malformed_first_block_skipped(self) -> None:
        html = (
            '<script type="application/ld+json">{oops</script>'
            '<script type="application/ld+json">'
            f"{json.dumps(_WIDGET)}</script>"
        )
        soup = parse_html(html)
        self.assertEqual(StructuredFieldParser.extract_title(soup), "Widget")


class TestFallbackChain(unittest.TestCase):
    """Meta, selector and free-text fallbacks."""

    def test_og_title(self) -> None:
        soup = parse_html(
            '<head><meta property="og:title" content="Meta Widget"></head>'
            "<body><h1>Heading Widget</h1></body>"
        )
        self.assertEqual(
            StructuredFieldParser.extract_title(soup), "Meta Widget"
        )

    def test_h1_then_title_tag(self) -> None:
        soup = parse_html("<body><h1>Widget 3000</h1></body>")
        self.assertEqual(
            StructuredFieldParser.extract_title(soup), "Widget 3000"
        )
        soup = parse_html("<head><title> Shop | Thing </title></head>")
        self.assertEqual(
            StructuredFieldParser.extract_title(soup), "Shop | Thing"
        )

    def test_itemprop_content_attribute(self) -> None:
        soup = parse_html(
            '<span itemprop="price" content="49.00">$49</span>'
            '<span itemprop="ratingValue">4.7</span>'
            '<span itemprop="reviewCount">1,024</span>'
        )
        self.assertEqual(StructuredFieldParser.extract_price(soup), 49.0)
        self.assertEqual(StructuredFieldParser.extract_rating(soup), 4.7)
        self.assertEqual(
            StructuredFieldParser.extract_review_count(soup), 1024
        )

    def test_price_element_skips_discount(self) -> None:
        soup = parse_html(
            '<div class="price-box"><span>Save 15%</span> '
            "<span>$85.00</span></div>"
        )
        self.assertEqual(StructuredFieldParser.extract_price(soup), 85.0)

    def test_rating_element_skips_review_count(self) -> None:
        soup = parse_html(
            '<div class="product-rating"><span>(1,024 reviews)</span>'
            " 4.6 out of 5 stars</div>"
        )
        self.assertEqual(StructuredFieldParser.extract_rating(soup), 4.6)
        self.assertEqual(
            StructuredFieldParser.extract_review_count(soup), 1024
        )

    def test_rating_count_element_is_not_a_rating(self) -> None:
        soup = parse_html('<span class="rating-count">1,234 ratings</span>')
        self.assertIsNone(StructuredFieldParser.extract_rating(soup))
        self.assertEqual(
            StructuredFieldParser.extract_review_count(soup), 1234
        )

    def test_currency_meta(self) -> None:
        soup = parse_html(
            '<head><meta property="product:price:currency" content="EUR">'
            "</head><body>$ sign elsewhere</body>"
        )
        self.assertEqual(StructuredFieldParser.extract_currency(soup), "EUR")

    def test_free_text(self) -> None:
        soup = parse_html(
            "<div>Only today: £12.50 while stocks last</div>"
            "<div>Based on (342 reviews)</div>"
            "<div>4.6 out of 5</div>"
        )
        self.assertEqual(StructuredFieldParser.extract_price(soup), 12.5)
        self.assertEqual(StructuredFieldParser.extract_currency(soup), "GBP")
        self.assertEqual(
            StructuredFieldParser.extract_review_count(soup), 342
        )
        self.assertEqual(StructuredFieldParser.extract_rating(soup), 4.6)

    def test_script_text_not_scanned(self) -> None:
        soup = parse_html("<script>var p = '$99.99';</script><p>Hello</p>")
        self.assertIsNone(StructuredFieldParser.extract_price(soup))

    def test_total_miss(self) -> None:
        soup = parse_html("<p>Nothing useful here</p>")
        self.assertIsNone(StructuredFieldParser.extract_title(soup))
        self.assertIsNone(StructuredFieldParser.extract_price(soup))
        self.assertIsNone(StructuredFieldParser.extract_rating(soup))
        self.assertIsNone(StructuredFieldParser.extract_review_count(soup))
        self.assertEqual(StructuredFieldParser.extract_currency(soup), "USD")


class TestParseRecord(unittest.TestCase):
    """parse_record assembles a ProductRecord."""

    def test_record_fields(self) -> None:
        payload = dict(
            _WIDGET,
            aggregateRating={"ratingValue": 4.5, "reviewCount": 120},
        )
        soup = parse_html(_json_ld_page(payload))
        record = StructuredFieldParser.parse_record(
            soup, "https://shop.example/w", timestamp=1234
        )
        self.assertEqual(record.url, "https://shop.example/w")
        self.assertEqual(record.title, "Widget")
        self.assertEqual(record.price, 19.99)
        self.assertEqual(record.currency, "USD")
        self.assertEqual(record.rating, 4.5)
        self.assertEqual(record.review_count, 120)
        self.assertEqual(record.timestamp, 1234)

    def test_default_timestamp_is_now(self) -> None:
        record = StructuredFieldParser.parse_record(
            parse_html("<p>x</p>"), "u"
        )
        self.assertGreater(record.timestamp, 1_600_000_000_000)


if __name__ == "__main__":
    unittest.main()
