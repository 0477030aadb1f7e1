from __future__ import annotations

import threading

import pytest

from codeshare.realtime import events


@pytest.fixture
def room(registry):
    return registry.create()


@pytest.fixture
def pair(room, realtime, channel):
    """Room with two members and a clean channel."""
    realtime.join("c1", room.id, "Ada")
    realtime.join("c2", room.id, "Linus")
    channel.clear()
    return room


# ---------------------------------------------------------------------------
# join / disconnect
# ---------------------------------------------------------------------------

def test_join_unknown_room_sends_notice(realtime, channel):
    assert realtime.join("c1", "missing", "Ada") is False

    assert channel.events_for("c1") == [(events.ERROR_NOTICE, {"message": "Room not found"})]
    assert realtime.room_of("c1") is None


def test_joiner_gets_snapshot_then_roster(room, realtime, channel):
    assert realtime.join("c1", room.id, "Ada") is True

    names = channel.names_for("c1")
    assert names == [events.FILES_SNAPSHOT, events.ROSTER_CHANGED]

    snapshot = channel.payloads("c1", events.FILES_SNAPSHOT)[0]
    root = snapshot["/"]
    assert root["type"] == "directory"
    assert sorted(root["children"]) == ["example.py", "main.js"]
    assert root["children"]["main.js"]["path"] == "/main.js"
    assert "Hello, World!" in root["children"]["main.js"]["content"]

    roster = channel.payloads("c1", events.ROSTER_CHANGED)[0]
    assert [member["name"] for member in roster] == ["Ada"]


def test_others_are_told_about_new_member(room, realtime, channel):
    realtime.join("c1", room.id, "Ada")
    channel.clear()

    realtime.join("c2", room.id, "Linus")

    joined = channel.payloads("c1", events.MEMBER_JOINED)
    assert len(joined) == 1
    assert joined[0]["member"]["id"] == "c2"
    assert [m["id"] for m in joined[0]["roster"]] == ["c1", "c2"]
    assert events.MEMBER_JOINED not in channel.names_for("c2")


def test_snapshot_is_a_copy(room, realtime, channel):
    realtime.join("c1", room.id, "Ada")
    snapshot = channel.payloads("c1", events.FILES_SNAPSHOT)[0]

    snapshot["/"]["children"]["main.js"]["content"] = "tampered"

    assert room.tree.resolve("/main.js").content != "tampered"


def test_disconnect_notifies_remaining_members(pair, realtime, channel):
    realtime.disconnect("c2")

    left = channel.payloads("c1", events.MEMBER_LEFT)
    assert left == [{"memberId": "c2", "roster": left[0]["roster"]}]
    assert [m["id"] for m in left[0]["roster"]] == ["c1"]
    assert realtime.room_of("c2") is None


def test_last_disconnect_destroys_room(room, realtime, registry, channel):
    realtime.join("c1", room.id, "Ada")
    channel.clear()

    realtime.disconnect("c1")

    assert registry.get(room.id) is None
    assert channel.sent == []


def test_disconnect_of_unknown_connection_is_ignored(realtime, channel):
    realtime.disconnect("ghost")

    assert channel.sent == []


def test_joining_another_room_leaves_the_first(registry, realtime, channel):
    first = registry.create()
    second = registry.create()
    realtime.join("c1", first.id, "Ada")
    realtime.join("c2", first.id, "Linus")
    channel.clear()

    realtime.join("c2", second.id, "Linus")

    assert [u.id for u in first.users] == ["c1"]
    assert [u.id for u in second.users] == ["c2"]
    assert realtime.room_of("c2") == second.id
    assert channel.payloads("c1", events.MEMBER_LEFT)[0]["memberId"] == "c2"


# ---------------------------------------------------------------------------
# edits and cursors
# ---------------------------------------------------------------------------

def test_edit_content_relays_to_others(pair, realtime, channel):
    assert realtime.edit_content("c1", pair.id, "/main.js", "console.log(2)") is True

    assert pair.tree.resolve("/main.js").content == "console.log(2)"
    assert channel.names_for("c1") == []
    assert channel.payloads("c2", events.CONTENT_UPDATED) == [
        {"filePath": "/main.js", "content": "console.log(2)"}
    ]


def test_edit_of_directory_or_missing_file_is_ignored(pair, realtime, channel):
    realtime.create_entry("c1", pair.id, "/src", kind="directory")
    channel.clear()

    assert realtime.edit_content("c1", pair.id, "/src", "x") is False
    assert realtime.edit_content("c1", pair.id, "/nope.txt", "x") is False
    assert channel.sent == []


def test_last_edit_wins(pair, realtime):
    realtime.edit_content("c1", pair.id, "/main.js", "from c1")
    realtime.edit_content("c2", pair.id, "/main.js", "from c2")

    assert pair.tree.resolve("/main.js").content == "from c2"


def test_cursor_move_names_the_mover(pair, realtime, channel):
    position = {"lineNumber": 3, "column": 7}

    assert realtime.cursor_move("c1", pair.id, position) is True

    assert channel.payloads("c2", events.CURSOR_MOVED) == [
        {"userId": "c1", "userName": "Ada", "position": position}
    ]
    assert channel.names_for("c1") == []


def test_non_member_cannot_mutate(pair, realtime, channel):
    assert realtime.edit_content("outsider", pair.id, "/main.js", "pwned") is False
    assert realtime.delete_entry("outsider", pair.id, "/main.js") is False

    assert pair.tree.resolve("/main.js").content != "pwned"
    assert channel.events_for("outsider") == [
        (events.ERROR_NOTICE, {"message": "Not a member of this room"}),
        (events.ERROR_NOTICE, {"message": "Not a member of this room"}),
    ]
    assert channel.names_for("c1") == []


def test_event_for_missing_room_sends_notice(realtime, channel):
    assert realtime.create_entry("c1", "missing", "/a.txt") is False

    assert channel.events_for("c1") == [(events.ERROR_NOTICE, {"message": "Room not found"})]


# ---------------------------------------------------------------------------
# structural operations
# ---------------------------------------------------------------------------

def test_create_file_broadcasts_to_everyone(pair, realtime, channel):
    assert realtime.create_entry("c1", pair.id, "//src//app.js", content="let x;") is True

    for connection_id in ("c1", "c2"):
        created = channel.payloads(connection_id, events.ENTRY_CREATED)
        assert len(created) == 1
        assert created[0]["filePath"] == "/src/app.js"
        assert created[0]["node"]["type"] == "file"
        assert created[0]["node"]["content"] == "let x;"
    assert pair.tree.resolve("/src").is_dir


def test_create_directory(pair, realtime, channel):
    assert realtime.create_entry("c1", pair.id, "/docs", kind="directory") is True

    node = channel.payloads("c2", events.ENTRY_CREATED)[0]["node"]
    assert node["type"] == "directory"
    assert node["children"] == {}


def test_create_rejections_send_notices(pair, realtime, channel):
    assert realtime.create_entry("c1", pair.id, "/main.js/inner.js") is False
    assert realtime.create_entry("c1", pair.id, "/", kind="directory") is False
    assert realtime.create_entry("c1", pair.id, "/x", kind="symlink") is False

    assert channel.names_for("c1") == [events.ERROR_NOTICE] * 3
    assert channel.names_for("c2") == []


def test_create_then_delete_leaves_path_absent(pair, realtime, channel):
    realtime.create_entry("c1", pair.id, "/tmp.txt")
    realtime.delete_entry("c2", pair.id, "/tmp.txt")

    assert pair.tree.resolve("/tmp.txt") is None
    assert channel.names_for("c1") == [events.ENTRY_CREATED, events.ENTRY_DELETED]
    assert channel.names_for("c2") == [events.ENTRY_CREATED, events.ENTRY_DELETED]


def test_delete_missing_is_silent(pair, realtime, channel):
    assert realtime.delete_entry("c1", pair.id, "/ghost.txt") is False
    assert realtime.delete_entry("c1", pair.id, "/ghost.txt") is False

    assert channel.sent == []


def test_rename_creates_parents_and_broadcasts(pair, realtime, channel):
    realtime.create_entry("c1", pair.id, "/a.txt", content="hello")
    channel.clear()

    assert realtime.rename_entry("c2", pair.id, "/a.txt", "/b/a.txt") is True

    assert pair.tree.resolve("/a.txt") is None
    assert pair.tree.resolve("/b").is_dir
    assert pair.tree.resolve("/b/a.txt").content == "hello"
    for connection_id in ("c1", "c2"):
        assert channel.payloads(connection_id, events.ENTRY_RENAMED) == [
            {"oldPath": "/a.txt", "newPath": "/b/a.txt"}
        ]


def test_rename_that_cannot_apply_is_silent(pair, realtime, channel):
    assert realtime.rename_entry("c1", pair.id, "/ghost.txt", "/b.txt") is False
    assert realtime.rename_entry("c1", pair.id, "/main.js", "/example.py/main.js") is False

    assert channel.sent == []
    assert pair.tree.resolve("/main.js") is not None


# ---------------------------------------------------------------------------
# ordering under concurrency
# ---------------------------------------------------------------------------

def test_concurrent_create_delete_pairs(pair, realtime, channel):
    def worker(index):
        path = f"/w{index}.txt"
        realtime.create_entry("c1", pair.id, path, content=str(index))
        realtime.delete_entry("c2", pair.id, path)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(16)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(10)

    for index in range(16):
        assert pair.tree.resolve(f"/w{index}.txt") is None

    streams = {cid: channel.events_for(cid) for cid in ("c1", "c2")}
    assert streams["c1"] == streams["c2"]
    seen_created = set()
    for event, payload in streams["c1"]:
        if event == events.ENTRY_CREATED:
            seen_created.add(payload["filePath"])
        else:
            assert payload["filePath"] in seen_created


def test_members_observe_mutations_in_apply_order(pair, realtime, channel):
    def editor(connection_id):
        for i in range(40):
            realtime.edit_content(connection_id, pair.id, "/main.js", f"{connection_id}-{i}")

    threads = [threading.Thread(target=editor, args=(cid,)) for cid in ("c1", "c2")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(10)

    # Whoever did not write last saw the final content relayed last
    final = pair.tree.resolve("/main.js").content
    last_relayed = {
        cid: channel.payloads(cid, events.CONTENT_UPDATED)[-1]["content"]
        for cid in ("c1", "c2")
    }
    assert final in last_relayed.values()


def test_broadcast_paths_are_normalized(pair, realtime, channel):
    realtime.create_entry("c1", pair.id, "//docs//a.txt", content="a")
    realtime.edit_content("c1", pair.id, "docs//a.txt", "b")
    realtime.rename_entry("c1", pair.id, "//docs/a.txt", "notes//a.txt/")
    realtime.delete_entry("c1", pair.id, "notes//")

    assert channel.payloads("c2", events.ENTRY_CREATED)[0]["filePath"] == "/docs/a.txt"
    assert channel.payloads("c2", events.CONTENT_UPDATED)[0]["filePath"] == "/docs/a.txt"
    assert channel.payloads("c2", events.ENTRY_RENAMED) == [
        {"oldPath": "/docs/a.txt", "newPath": "/notes/a.txt"}
    ]
    assert channel.payloads("c2", events.ENTRY_DELETED) == [{"filePath": "/notes"}]
