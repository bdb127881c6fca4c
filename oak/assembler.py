"""
OAK static site assembler.

Turns a local OAK workspace into servable endpoint files::

    source-dir/
    ├── card.json
    ├── knowledge/{date}/{slug}.json
    └── trust/{agent}/{topic}.json

becomes::

    output-dir/
    ├── oak/card                          (Agent Card JSON)
    ├── oak/knowledge/_index              (Artifact listing JSON)
    ├── oak/knowledge/artifacts/{id}      (Individual artifacts)
    ├── oak/trust/_index                  (Trust listing JSON)
    ├── oak/trust/assertions/{to}/{topic} (Individual assertions)
    └── oak/services                      (Service listing JSON)

Malformed inputs never abort a build. Files that fail to parse, and documents
that cannot be placed in the output tree, are reported as ``SkippedFile``
entries next to the results.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from oak import config

logger = logging.getLogger(__name__)

UNKNOWN_AGENT = "unknown"

LISTING_FIELDS = ("id", "type", "title", "topics", "created")

_FRACTION = re.compile(r"(?<=:\d\d)\.(\d+)")


@dataclass(frozen=True)
class SkippedFile:
    """A source file left out of the build, with the reason."""

    path: Path
    reason: str


@dataclass
class WalkResult:
    """Documents collected from a directory tree plus the files skipped on the way."""

    documents: List[Tuple[Path, Dict[str, Any]]] = field(default_factory=list)
    skipped: List[SkippedFile] = field(default_factory=list)

    def extend(self, other: "WalkResult"):
        self.documents.extend(other.documents)
        self.skipped.extend(other.skipped)


@dataclass
class BuildResult:
    """Summary of one site build."""

    source_dir: Path
    output_dir: Path
    agent: str = UNKNOWN_AGENT
    card_written: bool = False
    artifact_count: int = 0
    trust_count: int = 0
    service_count: int = 0
    written: List[Path] = field(default_factory=list)
    skipped: List[SkippedFile] = field(default_factory=list)


def walk_json(directory: Union[str, Path]) -> WalkResult:
    """
    Collect every ``*.json`` object document below a directory.

    Entries are visited in sorted order so builds are reproducible. Invalid
    JSON and documents that are not JSON objects are skipped with a warning.
    A missing directory yields an empty result.
    """
    directory = Path(directory)
    result = WalkResult()
    if not directory.is_dir():
        return result

    for entry in sorted(directory.iterdir()):
        if entry.is_dir():
            result.extend(walk_json(entry))
        elif entry.suffix == ".json":
            if not entry.is_file():
                _skip(result.skipped, entry, "not a regular file")
                continue
            try:
                with open(entry, "r", encoding="utf-8") as f:
                    document = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                _skip(result.skipped, entry, f"invalid JSON: {e}")
                continue
            except OSError as e:
                _skip(result.skipped, entry, f"cannot read: {e}")
                continue
            if not isinstance(document, dict):
                _skip(result.skipped, entry, "not a JSON object")
                continue
            result.documents.append((entry, document))
    return result


def _skip(skipped: List[SkippedFile], path: Path, reason: str):
    logger.warning(f"⚠️  Skipping {path}: {reason}")
    skipped.append(SkippedFile(path, reason))


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse an ISO 8601 timestamp; returns None when missing or unparseable."""
    if not isinstance(value, str):
        return None
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    # fromisoformat before 3.11 only takes 3 or 6 fractional digits
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_artifacts(artifacts: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Order artifacts newest first by ``created``.

    Undated artifacts go last; ties keep their input order.
    """
    dated = [(parse_timestamp(a.get("created")), a) for a in artifacts]
    newest_first = sorted((pair for pair in dated if pair[0] is not None), key=lambda pair: pair[0], reverse=True)
    undated = [a for created, a in dated if created is None]
    return [a for _, a in newest_first] + undated


def artifact_url(artifact_id: str) -> str:
    return f"oak/knowledge/artifacts/{artifact_id}"


def trust_url(to_name: str, topic: str) -> str:
    return f"oak/trust/assertions/{to_name}/{topic}"


def artifact_summary(artifact: Dict[str, Any]) -> Dict[str, Any]:
    """Listing entry for an artifact: summary-level fields only, never the body."""
    content = artifact.get("content")
    citations = artifact.get("citations")
    # Absent fields are left out; fields explicitly set to null are kept.
    summary = {key: artifact[key] for key in LISTING_FIELDS if key in artifact}
    summary["summary"] = (content.get("summary") if isinstance(content, dict) else None) or ""
    summary["citationCount"] = len(citations) if isinstance(citations, list) else 0
    summary["url"] = artifact_url(artifact["id"])
    return summary


def trust_summary(assertion: Dict[str, Any]) -> Dict[str, Any]:
    to_name = assertion["to"]["name"]
    summary = {"to": to_name, "topic": assertion["topic"]}
    if "level" in assertion:
        summary["level"] = assertion["level"]
    summary["url"] = trust_url(to_name, assertion["topic"])
    return summary


def collect_services(artifacts: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Flatten each artifact's ``services`` entries, tagging them with their source artifact."""
    services = []
    for artifact in artifacts:
        for service in artifact.get("services") or []:
            if isinstance(service, dict):
                services.append({**service, "sourceArtifact": artifact.get("id")})
    return services


def _relative_parts(*segments: Any) -> Optional[List[str]]:
    """Split output path segments, rejecting anything that could escape the output tree."""
    parts: List[str] = []
    for segment in segments:
        if not isinstance(segment, str):
            return None
        for part in segment.split("/"):
            if part in ("", ".", "..") or "\\" in part:
                return None
            parts.append(part)
    return parts


def write_json(path: Path, data: Any):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO 8601 UTC timestamp with millisecond precision, e.g. ``2026-02-01T10:00:00.000Z``."""
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _load_card(card_path: Path, skipped: List[SkippedFile]) -> Optional[Dict[str, Any]]:
    if not card_path.is_file():
        logger.warning("⚠️  No card.json found, skipping card endpoint")
        return None
    try:
        with open(card_path, "r", encoding="utf-8") as f:
            card = json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        _skip(skipped, card_path, f"invalid JSON: {e}")
        return None
    except OSError as e:
        _skip(skipped, card_path, f"cannot read: {e}")
        return None
    if not isinstance(card, dict):
        _skip(skipped, card_path, "not a JSON object")
        return None
    return card


def build_site(
    source_dir: Union[str, Path],
    output_dir: Optional[Union[str, Path]] = None,
    now: Optional[datetime] = None,
    echo: Callable[[str], None] = lambda line: None,
) -> BuildResult:
    """
    Build the static OAK endpoint tree.

    Args:
        source_dir: OAK workspace containing card.json, knowledge/ and trust/
        output_dir: Destination; defaults to ``<source_dir>/site``
        now: Build time stamped into the card's ``oak.updatedAt``
        echo: Receives one progress line per generated resource group

    Returns:
        A BuildResult with counts, written files and skipped inputs
    """
    source_dir = Path(source_dir)
    output_dir = Path(output_dir) if output_dir is not None else config.get_default_output_dir(source_dir)
    oak_out = output_dir / "oak"
    result = BuildResult(source_dir=source_dir, output_dir=output_dir)

    def emit(path: Path, data: Any):
        write_json(path, data)
        result.written.append(path)

    def emit_detail(path: Path, document: Dict[str, Any]):
        # An id that is a prefix of another id cannot be both a file and a directory.
        try:
            emit(path, document)
        except OSError as e:
            _skip(result.skipped, sources[id(document)], f"cannot write {path}: {e}")

    knowledge = walk_json(source_dir / "knowledge")
    trust = walk_json(source_dir / "trust")
    result.skipped.extend(knowledge.skipped)
    result.skipped.extend(trust.skipped)

    sources: Dict[int, Path] = {}
    artifacts = []
    for path, artifact in knowledge.documents:
        if _relative_parts(artifact.get("id")) is None:
            _skip(result.skipped, path, "artifact has no usable id")
            continue
        sources[id(artifact)] = path
        artifacts.append(artifact)
    artifacts = sort_artifacts(artifacts)

    assertions = []
    for path, assertion in trust.documents:
        to = assertion.get("to")
        to_name = to.get("name") if isinstance(to, dict) else None
        if _relative_parts(to_name, assertion.get("topic")) is None:
            _skip(result.skipped, path, "assertion has no usable to.name/topic")
            continue
        sources[id(assertion)] = path
        assertions.append(assertion)

    # 1. Agent card
    card = _load_card(source_dir / "card.json", result.skipped)
    if card is not None:
        result.agent = card.get("name") or UNKNOWN_AGENT
        oak_block = card.get("oak")
        if isinstance(oak_block, dict):
            if isinstance(oak_block.get("stats"), dict):
                oak_block["stats"]["artifactCount"] = len(artifacts)
            oak_block["updatedAt"] = utc_timestamp(now)
        emit(oak_out / "card", card)
        result.card_written = True
        echo(f"✅ Card: {card.get('name')}")

    # 2. Knowledge listing and artifacts
    emit(
        oak_out / "knowledge" / "_index",
        {
            "agent": result.agent,
            "total": len(artifacts),
            "artifacts": [artifact_summary(a) for a in artifacts],
        },
    )
    result.artifact_count = len(artifacts)
    echo(f"✅ Knowledge listing: {len(artifacts)} artifact(s)")

    for artifact in artifacts:
        emit_detail(oak_out.joinpath("knowledge", "artifacts", *_relative_parts(artifact["id"])), artifact)

    # 3. Trust listing and assertions
    emit(
        oak_out / "trust" / "_index",
        {
            "agent": result.agent,
            "given": [trust_summary(t) for t in assertions],
            "received": [],
        },
    )
    result.trust_count = len(assertions)
    echo(f"✅ Trust listing: {len(assertions)} assertion(s)")

    for assertion in assertions:
        parts = _relative_parts(assertion["to"]["name"], assertion["topic"])
        emit_detail(oak_out.joinpath("trust", "assertions", *parts), assertion)

    # 4. Services extracted from artifacts
    services = collect_services(artifacts)
    emit(oak_out / "services", {"agent": result.agent, "services": services})
    result.service_count = len(services)
    echo(f"✅ Services: {len(services)} service(s)")

    if result.skipped:
        logger.warning(f"Skipped {len(result.skipped)} input file(s)")
    return result
