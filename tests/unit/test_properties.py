from kafka_harness.properties import render_properties, write_properties


def test_render_keeps_insertion_order():
    text = render_properties({"broker.id": "1", "listeners": "PLAINTEXT://localhost:9092"})

    assert text == "broker.id=1\nlisteners=PLAINTEXT://localhost:9092\n"


def test_render_escapes_backslashes_and_key_separators():
    text = render_properties({"log.dir": "C:\\kafka\\logs", "odd key": "a=b"})

    assert "log.dir=C:\\\\kafka\\\\logs\n" in text
    assert "odd\\ key=a=b\n" in text


def test_write_properties(tmp_path):
    path = write_properties(tmp_path / "server.properties", {"clientPort": "2181"})

    assert path.read_text(encoding="utf-8") == "clientPort=2181\n"
