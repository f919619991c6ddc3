"""Serialization of SentinelState to and from bytes.

The encoding is a UTF-8 JSON document with sorted keys and compact
separators, so equal states always encode to identical bytes:

    {"format": "spid-state", "version": 1,
     "watch_paths": ["/etc"],
     "known_objects": {"/etc/hosts": "<sha256 hex>"},
     "scans": [{"timestamp": "2024-01-01T00:00:00+00:00",
                "events": [{"type": "EV_CREATE", "path": "/etc/hosts",
                            "old_digest": "", "new_digest": "<sha256 hex>"}]}]}

Decoding is strict. Anything that does not match this shape raises
CorruptStateError; missing fields are never filled with defaults.
"""

import json
from datetime import datetime
from typing import Any, Dict, List

from spid.exceptions import CorruptStateError
from spid.models import Event, EventType, ScanRecord, SentinelState

FORMAT_TAG = "spid-state"
FORMAT_VERSION = 1


class StateCodec:
    """Encodes and decodes SentinelState values.

    ``decode(encode(state)) == state`` holds for every reachable state:
    watch paths and scan records keep their order, and the known-object
    index keeps all of its entries.
    """

    def encode(self, state: SentinelState) -> bytes:
        """Serialize a state.

        Args:
            state: The SentinelState to encode.

        Returns:
            The UTF-8 JSON encoding of the state.
        """
        document = {
            "format": FORMAT_TAG,
            "version": FORMAT_VERSION,
            "watch_paths": list(state.watch_paths),
            "known_objects": dict(state.known_objects),
            "scans": [self._encode_record(record) for record in state.scans],
        }
        # ASCII output escapes lone surrogates from undecodable file names
        return json.dumps(document, sort_keys=True, separators=(",", ":")).encode("utf-8")

    def decode(self, data: bytes) -> SentinelState:
        """Deserialize a state.

        Args:
            data: Bytes produced by encode().

        Returns:
            The decoded SentinelState.

        Raises:
            CorruptStateError: If the data is not a valid encoded state.
        """
        try:
            document = json.loads(data.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise CorruptStateError(f"State is not valid UTF-8: {e}") from e
        except ValueError as e:
            raise CorruptStateError(f"State is not valid JSON: {e}") from e

        document = _expect(document, dict, "state")
        if document.get("format") != FORMAT_TAG:
            raise CorruptStateError("State has an unknown format tag")
        if document.get("version") != FORMAT_VERSION:
            raise CorruptStateError(
                f"Unsupported state version: {document.get('version')!r}"
            )

        watch_paths = _expect(_field(document, "watch_paths", "state"), list, "watch_paths")
        for path in watch_paths:
            _expect(path, str, "watch path")

        known_objects = _expect(
            _field(document, "known_objects", "state"), dict, "known_objects"
        )
        for path, digest in known_objects.items():
            _expect(digest, str, f"digest of {path}")

        scans = _expect(_field(document, "scans", "state"), list, "scans")

        return SentinelState(
            watch_paths=tuple(watch_paths),
            known_objects=known_objects,
            scans=[self._decode_record(item) for item in scans],
        )

    def _encode_record(self, record: ScanRecord) -> Dict[str, Any]:
        return {
            "timestamp": record.timestamp.isoformat(),
            "events": [
                {
                    "type": event.event_type.value,
                    "path": event.path,
                    "old_digest": event.old_digest,
                    "new_digest": event.new_digest,
                }
                for event in record.events
            ],
        }

    def _decode_record(self, item: Any) -> ScanRecord:
        item = _expect(item, dict, "scan record")
        raw_timestamp = _expect(_field(item, "timestamp", "scan record"), str, "timestamp")
        try:
            timestamp = datetime.fromisoformat(raw_timestamp)
        except ValueError as e:
            raise CorruptStateError(f"Invalid scan timestamp: {raw_timestamp!r}") from e

        raw_events: List[Any] = _expect(_field(item, "events", "scan record"), list, "events")
        return ScanRecord(
            timestamp=timestamp,
            events=tuple(self._decode_event(raw) for raw in raw_events),
        )

    def _decode_event(self, raw: Any) -> Event:
        raw = _expect(raw, dict, "event")
        try:
            event_type = EventType(_field(raw, "type", "event"))
        except ValueError as e:
            raise CorruptStateError(f"Unknown event type: {raw.get('type')!r}") from e

        return Event(
            event_type=event_type,
            path=_expect(_field(raw, "path", "event"), str, "event path"),
            old_digest=_expect(_field(raw, "old_digest", "event"), str, "old_digest"),
            new_digest=_expect(_field(raw, "new_digest", "event"), str, "new_digest"),
        )


def _field(container: Dict[str, Any], key: str, what: str) -> Any:
    if key not in container:
        raise CorruptStateError(f"Missing '{key}' in {what}")
    return container[key]


def _expect(value: Any, expected: type, what: str) -> Any:
    # bool is an int subclass and must not pass for other types
    if not isinstance(value, expected) or isinstance(value, bool):
        raise CorruptStateError(
            f"Expected {expected.__name__} for {what}, got {type(value).__name__}"
        )
    return value
