import pytest

from configs.category_rules import CategoryRules, load_category_rules


def test_default_table_covers_all_seven_categories():
    rules = load_category_rules()

    assert rules.labels == [
        "Auto-Renewals",
        "Data Privacy / Data Selling",
        "Cancellation Fees or Penalties",
        "Unilateral Changes",
        "Arbitration / No Class Action",
        "Limitation of Liability",
        "Jurisdiction & Governing Law",
    ]
    assert all(rules.triggers_for(label) for label in rules.labels)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Auto-Renewals", "Auto-Renewals"),
        ("auto renewals", "Auto-Renewals"),
        ("DATA PRIVACY/DATA SELLING", "Data Privacy / Data Selling"),
        ("arbitration", "Arbitration / No Class Action"),
        ("jurisdiction_governing_law", "Jurisdiction & Governing Law"),
        ("Weather", None),
        ("", None),
        (None, None),
    ],
)
def test_canonical_label(raw, expected):
    assert load_category_rules().canonical_label(raw) == expected


def test_find_mentions_matches_labels_and_triggers():
    rules = load_category_rules()

    found = rules.find_mentions("Flags: Unilateral Changes, plus a limitation of liability cap.")

    assert found == ["Unilateral Changes", "Limitation of Liability"]


def test_unknown_label_is_rejected(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(
        'categories:\n  - label: "Weather"\n    triggers: ["rain"]\n',
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="Unknown category label"):
        CategoryRules(path)


def test_missing_labels_are_rejected(tmp_path):
    path = tmp_path / "rules.yaml"
    path.write_text(
        'categories:\n  - label: "Auto-Renewals"\n    triggers: ["auto-renew"]\n',
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="missing labels"):
        CategoryRules(path)


def test_missing_file_is_rejected(tmp_path):
    with pytest.raises(FileNotFoundError):
        CategoryRules(tmp_path / "absent.yaml")
