from evals.datasets import DATASETS, REGRESSION_DATA
from evals.run_evals import summarize
from evals.scorers import contains_links, mentions_expected


def test_contains_links():
    assert contains_links("See [Paris](https://x.test/p).") == 1.0
    assert contains_links("Paris, no link here") == 0.0
    assert contains_links("") == 0.0


def test_mentions_expected_is_case_insensitive():
    assert mentions_expected("The answer is PARIS.", "Paris") == 1.0
    assert mentions_expected("The answer is Lyon.", "Paris") == 0.0
    assert mentions_expected("anything", "") == 0.0


def test_regression_dataset_has_expected_answers():
    assert DATASETS["regression"] is REGRESSION_DATA
    assert REGRESSION_DATA[0].input == "What is the capital of France?"
    assert REGRESSION_DATA[0].expected == "Paris"
    assert all(case.expected for case in REGRESSION_DATA)


def test_summarize_averages_scores():
    results = [
        {"scores": {"contains_links": 1.0, "mentions_expected": 1.0}},
        {"scores": {"contains_links": 0.0, "mentions_expected": 1.0}},
    ]
    assert summarize(results) == {"contains_links": 0.5, "mentions_expected": 1.0}
    assert summarize([]) == {"contains_links": 0.0, "mentions_expected": 0.0}
