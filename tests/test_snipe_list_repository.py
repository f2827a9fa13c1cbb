# tests/test_snipe_list_repository.py
from repositories.snipe_list_repository import SnipeListRepository


def test_load_ignores_blank_lines_and_comments(tmp_path):
    path = tmp_path / "snipe-list.txt"
    path.write_text("# lista\nMintA\n\n  MintB  \n", encoding="utf-8")
    repo = SnipeListRepository(str(path))

    assert repo.load() == 2
    assert repo.is_in_list("MintA")
    assert repo.is_in_list("MintB")
    assert not repo.is_in_list("# lista")


def test_missing_file_means_empty_list(tmp_path):
    repo = SnipeListRepository(str(tmp_path / "nope.txt"))
    assert repo.load() == 0
    assert not repo.is_in_list("MintA")


def test_reload_picks_up_changes(tmp_path):
    path = tmp_path / "snipe-list.txt"
    path.write_text("MintA\n", encoding="utf-8")
    repo = SnipeListRepository(str(path))
    repo.load()

    path.write_text("MintB\n", encoding="utf-8")
    repo.load()
    assert not repo.is_in_list("MintA")
    assert repo.is_in_list("MintB")
