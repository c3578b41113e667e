"""Tests for the player blacklist and metadata rewrite rules."""

import re

import pytest

from conftest import make_snapshot
from playback_scrobbler.config.settings import RegexConfig, Settings
from playback_scrobbler.core.normalizer import (
    NormalizationRule,
    apply_rules,
    compile_blacklist,
    compile_rules,
    is_blacklisted,
    select_players,
)


def test_compile_blacklist_skips_invalid_patterns(logger, caplog):
    compiled = compile_blacklist(["[", "test"], logger)

    assert [pattern.pattern for pattern in compiled] == ["test"]
    assert "Skipping invalid blacklist entry" in caplog.text


@pytest.mark.parametrize("player, expected", [
    ("org.mpris.MediaPlayer2.chromium.instance10670", True),
    ("org.mpris.MediaPlayer2.firefox.instance_1_84", True),
    ("org.mozilla.firefox", True),
    ("com.tidal.desktop", False),
])
def test_is_blacklisted(player, expected):
    blacklist = [re.compile("firefox"), re.compile("chromium")]
    assert is_blacklisted(blacklist, player) is expected


def test_compile_rules_skips_invalid_patterns(logger, caplog):
    rules = compile_rules([
        RegexConfig(match="(", replace="", track=True),
        RegexConfig(match="^Without You", replace="With You", track=True),
    ], logger)

    assert len(rules) == 1
    assert rules[0].match.pattern == "^Without You"
    assert "Skipping invalid normalization rule" in caplog.text


def test_rule_rewrites_selected_fields_only():
    snapshot = make_snapshot()
    rule = NormalizationRule(match=re.compile("^Without You"), replace="With You", track=True)

    rewritten = rule.apply(snapshot)

    assert rewritten.track == "With You I'm Nothing"
    assert rewritten.album == snapshot.album
    assert snapshot.track == "Without You I'm Nothing"


def test_rule_rewrites_every_artist():
    snapshot = make_snapshot(artists=["Placebo - Topic", "David Bowie - Topic"])
    rule = NormalizationRule(match=re.compile(r" - Topic$"), replace="", artist=True)

    assert rule.apply(snapshot).artists == ["Placebo", "David Bowie"]


def test_rules_apply_in_order():
    snapshot = make_snapshot(album="Meds (Deluxe Edition)")
    rules = [
        NormalizationRule(match=re.compile(r" \(Deluxe Edition\)"), replace=" [deluxe]", album=True),
        NormalizationRule(match=re.compile(r"\[deluxe\]"), replace="(Deluxe)", album=True),
    ]

    assert apply_rules(snapshot, rules).album == "Meds (Deluxe)"


def test_rule_supports_group_references():
    snapshot = make_snapshot(track="Every You Every Me (2015 Remaster)")
    rule = NormalizationRule(
        match=re.compile(r"^(.*) \(\d{4} Remaster\)$"),
        replace=r"\1",
        track=True
    )

    assert rule.apply(snapshot).track == "Every You Every Me"


def test_select_players_filters_before_normalizing():
    raw = {
        "org.mpris.MediaPlayer2.firefox.instance_1_84": make_snapshot(),
        "org.mpris.MediaPlayer2.spotify": make_snapshot(track="Special K (Live)"),
    }
    blacklist = [re.compile("firefox")]
    rules = [NormalizationRule(match=re.compile(r" \(Live\)$"), replace="", track=True)]

    selected = select_players(raw, blacklist, rules)

    assert list(selected) == ["org.mpris.MediaPlayer2.spotify"]
    assert selected["org.mpris.MediaPlayer2.spotify"].track == "Special K"


@pytest.mark.parametrize("replace", [r"\2", r"\q", r"\g<name>"])
def test_compile_rules_skips_invalid_replacements(logger, caplog, replace):
    rules = compile_rules([
        RegexConfig(match=" - Remaster(ed)?$", replace=replace, track=True),
        RegexConfig(match=" - Topic$", replace="", artist=True),
    ], logger)

    assert [rule.match.pattern for rule in rules] == [" - Topic$"]
    assert "Skipping invalid normalization rule" in caplog.text


def test_compile_rules_accepts_group_references(logger):
    rules = compile_rules([RegexConfig(match=r"^(.*) - Remaster(ed)?$", replace=r"\1", track=True)], logger)

    assert len(rules) == 1


def test_group_reference_from_yaml(tmp_path, logger):
    path = tmp_path / "config.yaml"
    path.write_text('regexes:\n  - match: "^(.*) \\\\(Live\\\\)$"\n    replace: "\\\\1"\n    track: true\n', encoding="utf-8")
    rules = compile_rules(Settings.from_file(path).regexes, logger)

    result = apply_rules(make_snapshot(track="Special K (Live)"), rules)

    assert result.track == "Special K"
