"""Tests for discovery/scanner.py"""

import ipaddress
import itertools
import time
from unittest.mock import MagicMock, patch

import pytest

from config import SCAN, TIMING_FAST, TIMING_NORMAL
from config.exceptions import InventoryFileError, SetupError
from discovery.scanner import ArpScanner, _batched, parse_range
from mocks import LOCAL_MAC, MockFrameChannel, SilentChannel, make_interface, make_reply_frame
from storage.label_store import LabelEntry, LabelStore


class TestParseRange:
    """Tests for explicit range parsing."""

    def test_cidr(self):
        assert parse_range("192.168.0.0/24") == ipaddress.IPv4Network("192.168.0.0/24")

    def test_host_bits_allowed(self):
        assert parse_range("192.168.0.77/24") == ipaddress.IPv4Network("192.168.0.0/24")

    def test_bare_address(self):
        assert parse_range("10.0.0.1").num_addresses == 1

    def test_invalid_syntax(self):
        with pytest.raises(SetupError):
            parse_range("192.168.0.0/33")
        with pytest.raises(SetupError):
            parse_range("not-a-range")

    def test_ipv6_rejected(self):
        with pytest.raises(SetupError, match="IPv4"):
            parse_range("fe80::/64")


class TestBuildRequests:
    """One request per address in the range."""

    def test_every_address_once_including_edges(self, interface):
        scanner = ArpScanner(interface, SilentChannel())
        network = ipaddress.IPv4Network("10.1.2.0/30")
        frames = list(scanner.build_requests(network))

        targets = [ipaddress.IPv4Address(frame[38:42]) for frame in frames]
        assert targets == list(network)
        assert ipaddress.IPv4Address("10.1.2.0") in targets
        assert ipaddress.IPv4Address("10.1.2.3") in targets

    def test_full_slash_24(self, interface):
        frames = list(ArpScanner(interface, SilentChannel()).build_requests(
            ipaddress.IPv4Network("192.168.1.0/24")))
        assert len(frames) == 256
        assert len(set(frames)) == 256

    def test_frames_encoded_on_demand(self, interface):
        scanner = ArpScanner(interface, SilentChannel())

        with patch("discovery.scanner.encode_request", return_value=b"\x00" * 42) as mock_encode:
            frames = scanner.build_requests(ipaddress.IPv4Network("10.0.0.0/8"))
            assert mock_encode.call_count == 0
            first = list(itertools.islice(frames, SCAN.BATCH_SIZE))

        assert len(first) == SCAN.BATCH_SIZE
        assert mock_encode.call_count == SCAN.BATCH_SIZE

    def test_missing_mac_is_setup_error(self):
        scanner = ArpScanner(make_interface(mac=None), SilentChannel())
        with pytest.raises(SetupError):
            scanner.build_requests(ipaddress.IPv4Network("192.168.1.0/30"))


class TestResolveRange:
    def test_auto_detected_prefix(self, interface):
        scanner = ArpScanner(interface, SilentChannel())
        assert scanner.resolve_range() == ipaddress.IPv4Network("192.168.1.0/24")

    def test_override_used_verbatim(self, interface):
        override = ipaddress.IPv4Network("10.0.0.0/28")
        scanner = ArpScanner(interface, SilentChannel(), custom_range=override)
        assert scanner.resolve_range() == override


class TestTiming:
    def test_mode_selection(self, interface):
        assert ArpScanner(interface, SilentChannel()).timing is TIMING_NORMAL
        assert ArpScanner(interface, SilentChannel(), fast_mode=True).timing is TIMING_FAST


class TestSendBatching:
    def test_batches_of_32_with_pause(self, interface):
        channel = MagicMock()
        scanner = ArpScanner(interface, channel)
        frames = [bytes([n]) * 42 for n in range(100)]

        with patch("discovery.scanner.time.sleep") as mock_sleep:
            scanner._send_all(frames)

        assert channel.send.call_count == 100
        assert mock_sleep.call_count == 4
        mock_sleep.assert_called_with(SCAN.BATCH_PAUSE_SECONDS)

    def test_batched_helper(self):
        batches = list(_batched(list(range(65)), 32))
        assert [len(b) for b in batches] == [32, 32, 1]

    def test_batched_consumes_lazily(self):
        source = iter(range(1000))
        first = next(_batched(source, 32))
        assert first == list(range(32))
        assert next(source) == 32


class TestListener:
    """The listener's bounded window and drain reads."""

    def test_window_then_fixed_drain(self, interface):
        channel = SilentChannel()
        scanner = ArpScanner(interface, channel, fast_mode=True)

        # deadline computed at 0.0; two reads inside the window, then expiry
        with patch("discovery.scanner.time.monotonic", side_effect=[0.0, 0.1, 0.2, 10.0]):
            scanner._listen()

        assert channel.receive_calls == 2 + TIMING_FAST.DRAIN_READS

    def test_normal_mode_drain_count(self, interface):
        channel = SilentChannel()
        scanner = ArpScanner(interface, channel)

        with patch("discovery.scanner.time.monotonic", side_effect=[0.0, 10.0]):
            scanner._listen()

        assert channel.receive_calls == TIMING_NORMAL.DRAIN_READS

    def test_garbage_frames_skipped(self, interface):
        channel = MockFrameChannel(preload=[b"", b"\x00" * 5, b"\xff" * 60])
        scanner = ArpScanner(interface, channel, fast_mode=True)

        with patch("discovery.scanner.time.monotonic", side_effect=[0.0, 0.1, 0.2, 0.3, 10.0]):
            scanner._listen()

        assert len(scanner.registry) == 0

    def test_read_errors_do_not_stop_listener(self, interface):
        channel = MagicMock()
        channel.receive.side_effect = OSError("interface went down")
        scanner = ArpScanner(interface, channel, fast_mode=True)

        with patch("discovery.scanner.time.monotonic", side_effect=[0.0, 10.0]):
            scanner._listen()

        assert channel.receive.call_count == TIMING_FAST.DRAIN_READS


class TestProcessFrame:
    def test_reply_recorded_once(self, interface):
        scanner = ArpScanner(interface, SilentChannel())
        first = make_reply_frame("AA:BB:CC:DD:EE:01", "192.168.1.5")
        second = make_reply_frame("AA:BB:CC:DD:EE:99", "192.168.1.5")

        assert scanner.process_frame(first) is True
        assert scanner.process_frame(second) is False
        assert scanner.registry.snapshot()[0].mac_address == "AA:BB:CC:DD:EE:01"


@pytest.mark.slow
class TestScan:
    """End-to-end scans over the in-memory channel (fast mode)."""

    def test_discovers_responders_and_local_host(self, interface, small_network, mock_channel):
        scanner = ArpScanner(interface, mock_channel, fast_mode=True,
                             custom_range=small_network)
        hosts = scanner.scan()

        assert [str(h.address) for h in hosts] == ["192.168.1.1", "192.168.1.5", "192.168.1.50"]
        assert hosts[1].mac_address == "AA:BB:CC:DD:EE:01"
        assert hosts[2].mac_address == LOCAL_MAC

    def test_sends_one_frame_per_address(self, interface, small_network, mock_channel):
        ArpScanner(interface, mock_channel, fast_mode=True, custom_range=small_network).scan()
        assert mock_channel.sent_targets == list(small_network)

    def test_runs_full_window_without_early_exit(self, interface, small_network, mock_channel):
        scanner = ArpScanner(interface, mock_channel, fast_mode=True, custom_range=small_network)
        start = time.monotonic()
        scanner.scan()
        assert time.monotonic() - start >= TIMING_FAST.LISTEN_WINDOW_SECONDS

    def test_silent_network_reports_local_only(self, interface, small_network):
        hosts = ArpScanner(interface, MockFrameChannel(), fast_mode=True,
                           custom_range=small_network).scan()
        assert [str(h.address) for h in hosts] == ["192.168.1.50"]


@pytest.mark.slow
class TestLabelPopulation:
    """Placeholder label entries for newly seen hosts."""

    def test_adds_placeholders_for_unlabeled_responders(self, interface, small_network,
                                                        mock_channel, labels_path):
        labels_path.write_text("AA:BB:CC:DD:EE:FF=Router=router.local\n", encoding="utf-8")
        store = LabelStore(labels_path)
        scanner = ArpScanner(interface, mock_channel, fast_mode=True,
                             custom_range=small_network,
                             label_store=store, labels=store.load())
        scanner.scan()

        assert labels_path.read_text(encoding="utf-8") == (
            "AA:BB:CC:DD:EE:FF=Router=router.local\n"
            "AA:BB:CC:DD:EE:01==\n"
        )

    def test_no_population_without_store(self, interface, small_network,
                                         mock_channel, labels_path):
        ArpScanner(interface, mock_channel, fast_mode=True, custom_range=small_network).scan()
        assert not labels_path.exists()

    def test_write_failure_is_warning_only(self, interface, small_network, mock_channel):
        store = MagicMock()
        store.path = "labels.txt"
        store.ensure_entry.side_effect = InventoryFileError("read-only")
        scanner = ArpScanner(interface, mock_channel, fast_mode=True,
                             custom_range=small_network, label_store=store,
                             labels={"AA:BB:CC:DD:EE:FF": LabelEntry("AA:BB:CC:DD:EE:FF", "Router")})

        with patch("discovery.scanner.logger") as mock_logger:
            hosts = scanner.scan()

        assert len(hosts) == 3
        store.ensure_entry.assert_called_once_with("AA:BB:CC:DD:EE:01")
        mock_logger.warning.assert_called_once()
