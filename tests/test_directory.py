import pytest

from wumiibo.directory import Button, DirectoryEntry, DirectoryLister


@pytest.fixture
def sd_root(tmp_path):
    base = tmp_path / "wumiibo"
    base.mkdir()
    (base / "a.bin").write_bytes(b"a")
    (base / "b.bin").write_bytes(b"b")
    (base / "sub").mkdir()
    (base / "sub" / "c.bin").write_bytes(b"c")
    return tmp_path


def test_populate_lists_parent_first(sd_root):
    lister = DirectoryLister(sd_root)
    lister.populate_entries("/wumiibo")
    assert lister.entries[0] == DirectoryEntry("...", True)
    assert [e.name for e in lister.entries[1:]] == ["a.bin", "b.bin", "sub"]
    assert lister.selected_file_location == "/wumiibo"


def test_populate_missing_directory(sd_root):
    lister = DirectoryLister(sd_root)
    with pytest.raises(FileNotFoundError):
        lister.populate_entries("/nothere")


def test_down_and_up_wrap(sd_root):
    lister = DirectoryLister(sd_root)
    lister.populate_entries("/wumiibo")
    assert lister.handle_key(Button.UP) is False
    assert lister.selected == len(lister.entries) - 1
    lister.handle_key(Button.DOWN)
    assert lister.selected == 0


def test_enter_directory_and_back(sd_root):
    lister = DirectoryLister(sd_root)
    lister.populate_entries("/wumiibo")
    lister.handle_key(Button.UP)
    assert lister.entries[lister.selected].name == "sub"
    assert lister.handle_key(Button.A) is False
    assert lister.selected_file_location == "/wumiibo/sub"
    assert [e.name for e in lister.entries] == ["...", "c.bin"]
    assert lister.selected == 0
    lister.handle_key(Button.A)
    assert lister.selected_file_location == "/wumiibo"


def test_back_from_top_goes_to_default(sd_root):
    lister = DirectoryLister(sd_root)
    lister.populate_entries("/wumiibo")
    lister.handle_key(Button.A)
    assert lister.selected_file_location == "/wumiibo"
    assert lister.entries[0].name == "..."


def test_select_file(sd_root):
    lister = DirectoryLister(sd_root)
    lister.populate_entries("/wumiibo")
    lister.handle_key(Button.DOWN)
    assert lister.handle_key(Button.A) is True
    assert lister.has_selected is True
    assert lister.construct_file_location() == "/wumiibo/a.bin"
    assert lister.selected_file_location == "/wumiibo/a.bin"


def test_b_cancels(sd_root):
    lister = DirectoryLister(sd_root)
    lister.populate_entries("/wumiibo")
    assert lister.handle_key(Button.B) is True
    assert lister.has_selected is False


def test_paging(tmp_path):
    base = tmp_path / "wumiibo"
    base.mkdir()
    for index in range(25):
        (base / f"f{index:02d}.bin").write_bytes(b"")
    lister = DirectoryLister(tmp_path)
    lister.populate_entries("/wumiibo")
    lister.handle_key(Button.RIGHT)
    assert lister.selected == 20
    assert lister.page == 1
    visible = lister.visible_entries()
    assert len(visible) == len(lister.entries) - 20
    assert [flag for _, flag in visible].count(True) == 1
    assert visible[0] == (lister.entries[20], True)
    lister.handle_key(Button.LEFT)
    assert lister.selected == 0
    assert lister.page == 0


def test_right_on_last_page_wraps_within_page(tmp_path):
    (tmp_path / "wumiibo").mkdir()
    (tmp_path / "wumiibo" / "one.bin").write_bytes(b"")
    lister = DirectoryLister(tmp_path)
    lister.populate_entries("/wumiibo")
    lister.handle_key(Button.DOWN)
    lister.handle_key(Button.RIGHT)
    assert lister.selected == 1


def test_visible_entries_first_page(sd_root):
    lister = DirectoryLister(sd_root)
    lister.populate_entries("/wumiibo")
    visible = lister.visible_entries()
    assert [entry for entry, _ in visible] == list(lister.entries)
    assert visible[0][1] is True


def test_reset(sd_root):
    lister = DirectoryLister(sd_root)
    lister.populate_entries("/wumiibo")
    lister.reset()
    assert lister.has_selected is False
    assert lister.entries == ()