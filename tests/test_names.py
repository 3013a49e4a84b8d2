import pytest

from romshelf.core.dat.names import NameInfo, analyze_name, classify_token, decompose_name
from romshelf.db.models import Region, ReleaseType


def test_secret_of_mana():
    info = analyze_name("Secret of Mana (Europe) (Rev 1)")
    assert info.title == "Secret of Mana"
    assert info.revision == 1
    assert info.regions == (Region.EUROPE,)
    assert info.release_type is ReleaseType.OFFICIAL
    assert info.misc == ""


def test_star_fox_2_beta():
    info = analyze_name("Star Fox 2 (Japan) (Beta) (1994-05-13)")
    assert info.title == "Star Fox 2"
    assert info.release_type is ReleaseType.BETA
    assert info.revision == 0
    assert info.regions == (Region.JAPAN,)
    assert info.misc == "1994-05-13"


@pytest.mark.parametrize(
    "token, revision",
    [
        ("Beta 1", 0),
        ("Beta 2", 1),
        ("Beta 10", 9),
        ("Beta X", 0),
        ("Possible Beta", 0),
        ("Alpha Beta 3", 2),
    ],
)
def test_numbered_betas(token, revision):
    info = analyze_name(f"Some Game (USA) ({token})")
    assert info.release_type is ReleaseType.BETA
    assert info.revision == revision


@pytest.mark.parametrize("token, revision", [("Rev 1", 1), ("Rev 12", 12), ("Rev A", 0)])
def test_revisions(token, revision):
    info = analyze_name(f"Some Game ({token})")
    assert info.revision == revision
    assert info.release_type is ReleaseType.OFFICIAL


def test_multi_region_group_and_entities():
    info = analyze_name("Pop&apos;n TwinBee (USA, Europe) (Switch Online)")
    assert info.title == "Pop'n TwinBee"
    assert info.regions == (Region.USA, Region.EUROPE)
    assert info.misc == "Switch Online"


def test_classification_is_case_insensitive():
    info = analyze_name("Game (europe, JAPAN) (virtualconsole)")
    assert info.regions == (Region.EUROPE, Region.JAPAN)
    assert info.release_type is ReleaseType.VIRTUAL_CONSOLE


def test_release_type_names():
    assert analyze_name("Game (Sample)").release_type is ReleaseType.SAMPLE
    assert analyze_name("Game (Bootleg)").release_type is ReleaseType.BOOTLEG
    assert analyze_name("Game (Beta)").revision == 0


def test_last_misc_token_wins():
    info = analyze_name("Game (Proto) (En,Fr,De) (Alt 1)")
    assert info.misc == "Alt 1"


def test_title_without_groups():
    decomposed = decompose_name("  Uniracers  ")
    assert decomposed.title == "Uniracers"
    assert decomposed.groups == []
    assert analyze_name("Uniracers") == NameInfo(title="Uniracers")


def test_groups_keep_token_order_and_tolerate_gaps():
    decomposed = decompose_name("Game (Japan, En) junk (Rev 1)(Proto)")
    assert decomposed.title == "Game"
    assert decomposed.groups == [["Japan", "En"], ["Rev 1"], ["Proto"]]
    assert decomposed.tokens == ["Japan", "En", "Rev 1", "Proto"]


def test_unterminated_group_is_ignored():
    decomposed = decompose_name("Game (Japan) (Rev 2")
    assert decomposed.groups == [["Japan"]]
    assert analyze_name("Game (Japan) (Rev 2").revision == 0


@pytest.mark.parametrize(
    "raw",
    [
        "Secret of Mana (Europe) (Rev 1)",
        "Star Fox 2 (Japan) (Beta) (1994-05-13)",
        "Pop&apos;n TwinBee (USA, Europe) (Switch Online)",
    ],
)
def test_decomposing_the_base_title_again_yields_no_groups(raw):
    title = decompose_name(raw).title
    again = decompose_name(title)
    assert again.title == title
    assert again.groups == []


def test_classify_token_does_not_mutate_input():
    info = NameInfo(title="Game")
    updated = classify_token(info, "Europe")
    assert info.regions == ()
    assert updated.regions == (Region.EUROPE,)
    assert classify_token(updated, "Demo").misc == "Demo"
    assert updated.misc == ""
