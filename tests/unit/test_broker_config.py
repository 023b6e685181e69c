import logging
from pathlib import Path
from unittest.mock import patch

from kafka_harness.broker_config import LOG_DIR_PREFIX, BrokerConfigBuilder
from kafka_harness.config import TlsMaterial
from kafka_harness.network import BrokerIdentity, PortTriple

IDENTITY = BrokerIdentity(host="localhost", ports=PortTriple(coordination=2181, plaintext=9092, tls=9093))


def test_default_broker_config(tmp_path):
    builder = BrokerConfigBuilder(TlsMaterial(), str(tmp_path))

    props = builder.build("127.0.0.1:2181", IDENTITY)

    assert props["zookeeper.connect"] == "127.0.0.1:2181"
    assert props["broker.id"] == "1"
    assert props["host.name"] == "localhost"
    assert props["listeners"] == "PLAINTEXT://localhost:9092,SSL://localhost:9093"
    assert props["offsets.topic.replication.factor"] == "1"
    assert props["auto.create.topics.enable"] == "false"
    assert props["ssl.keystore.location"] == "src/test/resources/keystorefile.jks"
    assert props["ssl.truststore.location"] == "src/test/resources/truststorefile.jks"
    assert props["ssl.keystore.password"] == "password"
    assert props["ssl.truststore.password"] == "password"


def test_log_dir_is_fresh_and_unique(tmp_path):
    builder = BrokerConfigBuilder(TlsMaterial(), str(tmp_path))

    first = Path(builder.build("127.0.0.1:2181", IDENTITY)["log.dir"])
    second = Path(builder.build("127.0.0.1:2181", IDENTITY)["log.dir"])

    assert first != second
    assert first.parent == tmp_path.resolve()
    assert first.name.startswith(LOG_DIR_PREFIX)


def test_tls_disabled_drops_ssl_listener(tmp_path):
    builder = BrokerConfigBuilder(TlsMaterial(enabled=False), str(tmp_path))

    props = builder.build("127.0.0.1:2181", IDENTITY)

    assert props["listeners"] == "PLAINTEXT://localhost:9092"
    assert not any(key.startswith("ssl.") for key in props)


def test_overrides_win(tmp_path):
    builder = BrokerConfigBuilder(TlsMaterial(), str(tmp_path))

    props = builder.build(
        "127.0.0.1:2181",
        IDENTITY,
        {"auto.create.topics.enable": "true", "num.partitions": 4},
    )

    assert props["auto.create.topics.enable"] == "true"
    assert props["num.partitions"] == "4"


def test_stale_log_dir_is_removed(tmp_path):
    stale = tmp_path / "stale"
    stale.mkdir()
    (stale / "meta.properties").write_text("broker.id=1\n", encoding="utf-8")
    builder = BrokerConfigBuilder(TlsMaterial(), str(tmp_path))

    props = builder.build("127.0.0.1:2181", IDENTITY, {"log.dir": str(stale)})

    assert props["log.dir"] == str(stale)
    assert not stale.exists()


def test_stale_log_dir_removal_failure_is_logged(tmp_path, caplog):
    stale = tmp_path / "stale"
    stale.mkdir()
    builder = BrokerConfigBuilder(TlsMaterial(), str(tmp_path))

    with patch("kafka_harness.broker_config.shutil.rmtree", side_effect=OSError("busy")):
        with caplog.at_level(logging.WARNING, logger="kafka_harness.broker_config"):
            props = builder.build("127.0.0.1:2181", IDENTITY, {"log.dir": str(stale)})

    assert props["log.dir"] == str(stale)
    assert "unable to remove stale broker log dir" in caplog.text
