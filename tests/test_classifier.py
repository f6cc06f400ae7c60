import pytest

from econchat.core.classifier import RULES, classify, explain
from econchat.core.types import Tier


class TestClassify:
    def test_empty_string_is_standard(self):
        assert classify("") is Tier.STANDARD
        assert classify("   ") is Tier.STANDARD

    @pytest.mark.parametrize(
        "query",
        [
            "Assess debt sustainability for Niger",
            "Build a debt sustainability analysis for Niger",
            "Run a growth diagnostic for Ethiopia: what is the binding constraint?",
            "Apply the Hausmann-Rodrik-Velasco framework to Kenya",
            "Write a brief on Ghana's macroeconomic framework with policy implications",
        ],
    )
    def test_diagnostic_vocabulary_is_premium(self, query):
        assert classify(query) is Tier.PREMIUM

    @pytest.mark.parametrize(
        "query",
        [
            "What's Nigeria's GDP growth forecast for 2024-2026?",
            "Compare wheat production in Egypt vs Morocco 2015-2023",
            "Show Saudi Arabia's top 10 export partners in 2022",
            "How has life expectancy changed in Bangladesh since 2000?",
            "Get inflation data for Argentina from IMF",
        ],
    )
    def test_lookups_and_comparisons_are_standard(self, query):
        assert classify(query) is Tier.STANDARD

    def test_long_free_form_request_is_premium(self):
        query = " ".join(["word"] * 35)
        assert classify(query) is Tier.PREMIUM

    def test_override_always_wins(self):
        assert classify("Assess debt sustainability for Niger", override=Tier.STANDARD) is Tier.STANDARD
        assert classify("GDP of Kenya", override=Tier.PREMIUM) is Tier.PREMIUM
        assert classify("", override=Tier.PREMIUM) is Tier.PREMIUM

    def test_override_accepts_string_value(self):
        assert classify("GDP of Kenya", override="premium") is Tier.PREMIUM

    def test_deterministic(self):
        query = "Compare debt sustainability in Kenya and Ghana"
        assert {classify(query) for _ in range(5)} == {classify(query)}
        assert explain(query) == explain(query)

    def test_case_insensitive(self):
        assert classify("DEBT SUSTAINABILITY OF ZAMBIA") is Tier.PREMIUM


class TestRules:
    def test_labels_are_unique(self):
        labels = [rule.label for rule in RULES]
        assert len(labels) == len(set(labels))

    @pytest.mark.parametrize(
        "label, text",
        [
            ("debt_sustainability", "debt sustainability of niger"),
            ("growth_diagnostics", "binding constraints to growth"),
            ("hrv", "hausmann rodrik velasco"),
            ("multi_indicator_summary", "give me an overview of key indicators for kenya"),
            ("comparison", "kenya versus ghana"),
            ("trend", "gdp trend in chad"),
            ("time_range", "gdp from 2010 to 2020"),
            ("many_entities", "gdp of kenya, ghana, and togo"),
        ],
    )
    def test_rule_matches_its_vocabulary(self, label, text):
        rule = next(r for r in RULES if r.label == label)
        assert rule.matches(text)

    def test_phrases_match_whole_words_only(self):
        rule = next(r for r in RULES if r.label == "debt_sustainability")
        assert not rule.matches("gdp of dsanga")

    def test_explain_reports_matched_rules(self):
        verdict = explain("Assess debt sustainability for Niger")
        assert verdict.tier is Tier.PREMIUM
        assert "debt_sustainability" in verdict.matched
        assert verdict.premium_score > verdict.standard_score
