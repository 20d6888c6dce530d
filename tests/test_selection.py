from composite_studio.selection import classify


def test_classify_by_mime_prefix(add_file):
    assert classify(0, add_file("a.png", "image/png")).media_kind == "image"
    assert classify(0, add_file("b.mp4", "video/mp4")).media_kind == "video"
    assert classify(0, add_file("c.pdf", "application/pdf")).media_kind == "other"
    assert classify(0, add_file("d.JPG", "IMAGE/JPEG")).media_kind == "image"


def test_ambiguous_types_fall_back_to_other(add_file):
    for ct in (None, "", "garbage", "   "):
        item = classify(3, add_file("x.bin", ct))
        assert item.media_kind == "other"
        assert item.index == 3


def test_replace_keeps_order_and_duplicates(manager, add_file):
    files = [add_file("b.png", "image/png"), add_file("a.txt", "text/plain"), add_file("b.png", "image/png")]
    state = manager.replace_selection(files)
    assert state.filenames == ["b.png", "a.txt", "b.png"]
    assert [p.index for p in state.placeholders] == [0, 1, 2]
    assert state.generation == 1


def test_handles_cover_only_previewable_items(manager, add_file):
    state = manager.replace_selection([
        add_file("a.png", "image/png"),
        add_file("v.mp4", "video/mp4"),
        add_file("n.xyz", None),
    ])
    assert len(state.placeholders) == 3
    assert [h.name for h in state.handles] == ["a.png", "v.mp4"]
    other = state.placeholders[2]
    assert other.kind == "none" and other.label == "n.xyz" and other.status == "ready"


def test_replace_twice_releases_every_reference(manager, registry, add_file):
    files = [add_file("v1.mp4", "video/mp4"), add_file("v2.webm", "video/webm"), add_file("i.png", "image/png")]
    first = manager.replace_selection(files)
    second = manager.replace_selection(files)
    assert len(first.handles) == len(second.handles) == 3
    assert registry.created == 4
    assert registry.released == 2
    assert registry.live == 2
    old_tokens = {h.token for h in first.handles if h.token}
    assert all(registry.resolve(t) is None for t in old_tokens)


def test_clear_releases_everything(manager, registry, add_file):
    manager.replace_selection([add_file("v.mp4", "video/mp4"), add_file("w.mov", "video/quicktime")])
    state = manager.clear()
    assert state.items == [] and state.handles == [] and state.placeholders == []
    assert registry.created == registry.released == 2
    # idempotent
    manager.clear()
    assert registry.released == 2


def test_snapshot_is_detached(manager, add_file):
    manager.replace_selection([add_file("a.txt", "text/plain")])
    snap = manager.snapshot()
    manager.clear()
    assert snap.filenames == ["a.txt"]
    assert manager.state.filenames == []


def test_returned_state_survives_later_replace_and_decode(manager, scheduler, add_file, png):
    first = manager.replace_selection([add_file("a.png", "image/png", png()), add_file("v.mp4", "video/mp4")])
    scheduler.run_all()
    assert first.placeholders[0].status == "pending"
    assert manager.state.placeholders[0].status == "ready"
    manager.clear()
    assert first.generation == 1
    assert first.filenames == ["a.png", "v.mp4"]
    assert [h.name for h in first.handles] == ["a.png", "v.mp4"]
