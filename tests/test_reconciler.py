"""Tests for the version reconciler and drift verdicts."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from devrecon.drift.models import Reason, TrackedPackage, Verdict, VersionEntry
from devrecon.drift.reconciler import (
    compute_verdict,
    detect_drift,
    match_dependency,
    parse_tracked,
    reconcile,
)
from devrecon.manifests.locator import locate_all
from devrecon.manifests.models import Codebase


def _package_json(deps: dict[str, str], section: str = "dependencies") -> str:
    return json.dumps({"name": "x", section: deps})


def _drift(tmp_path: Path, names: list[str], *specs: str):
    codebases = [Codebase(name, tmp_path / name) for name in names]
    return detect_drift(locate_all(codebases), [parse_tracked(s) for s in specs])


def _entry(report, package: str, codebase: str) -> VersionEntry:
    pkg = next(p for p in report.packages if p.package == package)
    return next(e for e in pkg.entries if e.codebase == codebase)


# ── Tracked package specs ────────────────────────────────────────────────


class TestParseTracked:
    def test_exact(self):
        assert parse_tracked("typescript") == TrackedPackage("typescript", prefix=False)

    def test_prefix(self):
        tracked = parse_tracked("firebase*")
        assert tracked == TrackedPackage("firebase", prefix=True)
        assert tracked.label == "firebase*"

    def test_whitespace_trimmed(self):
        assert parse_tracked("  react ").name == "react"

    @pytest.mark.parametrize("spec", ["", "  ", "*"])
    def test_invalid(self, spec):
        with pytest.raises(ValueError):
            parse_tracked(spec)


class TestMatchDependency:
    def test_exact_match(self):
        assert match_dependency({"typescript": "5.1.0"}, parse_tracked("typescript")) == (
            "typescript",
            "5.1.0",
        )

    def test_exact_is_case_sensitive(self):
        assert match_dependency({"Firebase": "1.0"}, parse_tracked("firebase")) is None

    def test_exact_does_not_match_family(self):
        assert match_dependency({"firebase-admin": "12.0.0"}, parse_tracked("firebase")) is None

    def test_prefix_picks_lexically_first(self):
        deps = {"firebase-tools": "13.0.0", "firebase-admin": "12.0.0", "firebase": "10.1.0"}
        assert match_dependency(deps, parse_tracked("firebase*")) == ("firebase", "10.1.0")

    def test_prefix_no_match(self):
        assert match_dependency({"react": "18"}, parse_tracked("firebase*")) is None


# ── Verdicts ─────────────────────────────────────────────────────────────


def _found(codebase: str, version: str) -> VersionEntry:
    return VersionEntry(codebase=codebase, package="p", reason=Reason.FOUND, version=version)


def _absent(codebase: str) -> VersionEntry:
    return VersionEntry(codebase=codebase, package="p", reason=Reason.ABSENT)


class TestComputeVerdict:
    def test_two_equal_is_matched(self):
        assert compute_verdict([_found("a", "1.0"), _found("b", "1.0")]) is Verdict.MATCHED

    def test_two_different_is_mismatched(self):
        assert compute_verdict([_found("a", "5.1.0"), _found("b", "5.2.3")]) is Verdict.MISMATCHED

    def test_single_found_is_insufficient(self):
        assert compute_verdict([_found("a", "1.0"), _absent("b")]) is Verdict.INSUFFICIENT_DATA

    def test_none_found_is_insufficient(self):
        assert compute_verdict([_absent("a"), _absent("b")]) is Verdict.INSUFFICIENT_DATA

    def test_no_entries(self):
        assert compute_verdict([]) is Verdict.INSUFFICIENT_DATA

    def test_range_and_pin_are_not_normalized(self):
        assert compute_verdict([_found("a", "^5.1.0"), _found("b", "5.1.0")]) is Verdict.MISMATCHED


# ── End-to-end over the filesystem ───────────────────────────────────────


class TestDetectDrift:
    def test_firebase_family_mismatch(self, tmp_path: Path, write):
        write("backend/package.json", _package_json({"firebase-admin": "12.0.0"}))
        write("frontend/package.json", _package_json({"firebase": "10.1.0"}))

        report = _drift(tmp_path, ["backend", "frontend"], "firebase*")

        assert len(report.packages) == 1
        pkg = report.packages[0]
        assert pkg.package == "firebase*"
        assert pkg.verdict is Verdict.MISMATCHED
        assert [(e.codebase, e.version) for e in pkg.entries] == [
            ("backend", "12.0.0"),
            ("frontend", "10.1.0"),
        ]
        assert pkg.entries[0].matched_name == "firebase-admin"
        assert pkg.entries[0].manifest == "package.json"

    def test_identical_versions_matched(self, tmp_path: Path, write):
        write("api/package.json", _package_json({"typescript": "5.1.6"}, "devDependencies"))
        write("web/package.json", _package_json({"typescript": "5.1.6"}, "devDependencies"))
        report = _drift(tmp_path, ["api", "web"], "typescript")
        assert report.packages[0].verdict is Verdict.MATCHED

    def test_differing_versions_both_reported(self, tmp_path: Path, write):
        write("api/package.json", _package_json({"typescript": "5.1.0"}))
        write("web/package.json", _package_json({"typescript": "5.2.3"}))
        report = _drift(tmp_path, ["api", "web"], "typescript")
        pkg = report.packages[0]
        assert pkg.verdict is Verdict.MISMATCHED
        assert {e.version for e in pkg.entries} == {"5.1.0", "5.2.3"}

    def test_absent_everywhere_is_insufficient(self, tmp_path: Path, write):
        write("api/package.json", _package_json({"express": "4.18.2"}))
        write("web/package.json", _package_json({"react": "18.2.0"}))
        report = _drift(tmp_path, ["api", "web"], "firebase*")
        pkg = report.packages[0]
        assert pkg.verdict is Verdict.INSUFFICIENT_DATA
        assert [e.reason for e in pkg.entries] == [Reason.ABSENT, Reason.ABSENT]

    def test_one_entry_per_codebase_and_package(self, tmp_path: Path, write):
        write("api/package.json", _package_json({"typescript": "5.1.0"}))
        write("web/package.json", "{}")
        report = _drift(tmp_path, ["api", "web", "ios"], "typescript", "firebase*")
        assert [p.package for p in report.packages] == ["typescript", "firebase*"]
        for pkg in report.packages:
            assert [e.codebase for e in pkg.entries] == ["api", "web", "ios"]

    def test_codebase_without_manifest_is_absent(self, tmp_path: Path, write):
        write("api/package.json", _package_json({"typescript": "5.1.0"}))
        (tmp_path / "ios").mkdir()
        report = _drift(tmp_path, ["api", "ios"], "typescript")
        assert _entry(report, "typescript", "ios").reason is Reason.ABSENT

    def test_parse_error_isolated_to_its_codebase(self, tmp_path: Path, write):
        write("api/package.json", "{ this is not json")
        write("web/package.json", _package_json({"firebase": "10.1.0"}))
        write("admin/package.json", _package_json({"firebase": "10.1.0"}))

        report = _drift(tmp_path, ["api", "web", "admin"], "firebase")

        broken = _entry(report, "firebase", "api")
        assert broken.reason is Reason.PARSE_ERROR
        assert broken.version is None
        assert broken.manifest == "package.json"
        assert broken.detail
        assert _entry(report, "firebase", "web").reason is Reason.FOUND
        assert _entry(report, "firebase", "admin").version == "10.1.0"
        assert report.packages[0].verdict is Verdict.MATCHED

    def test_byte_order_mark_tolerated(self, tmp_path: Path, write):
        bom = write("api/package.json")
        bom.write_bytes(b"\xef\xbb\xbf" + _package_json({"typescript": "5.1.0"}).encode())
        write("web/package.json", _package_json({"typescript": "5.1.0"}))
        report = _drift(tmp_path, ["api", "web"], "typescript")
        assert _entry(report, "typescript", "api").reason is Reason.FOUND
        assert _entry(report, "typescript", "api").version == "5.1.0"
        assert report.packages[0].verdict is Verdict.MATCHED

    def test_parse_error_but_found_elsewhere_in_codebase(self, tmp_path: Path, write):
        write("api/package.json", "{ broken")
        write("api/requirements.txt", "firebase-admin==6.2.0\n")
        report = _drift(tmp_path, ["api"], "firebase-admin")
        entry = _entry(report, "firebase-admin", "api")
        assert entry.reason is Reason.FOUND
        assert entry.version == "6.2.0"
        assert entry.manifest == "requirements.txt"

    def test_prefix_family_yields_single_entry(self, tmp_path: Path, write):
        write(
            "api/package.json",
            _package_json(
                {"firebase-functions": "4.4.1", "firebase-admin": "12.0.0", "firebase-tools": "13.0.0"}
            ),
        )
        report = _drift(tmp_path, ["api"], "firebase*")
        entries = report.packages[0].entries
        assert len(entries) == 1
        assert entries[0].matched_name == "firebase-admin"
        assert entries[0].version == "12.0.0"

    def test_declaration_preferred_over_lockfile(self, tmp_path: Path, write):
        write("web/package.json", _package_json({"firebase": "^10.1.0"}))
        write("web/yarn.lock", 'firebase@^10.1.0:\n  version "10.1.0"\n')
        report = _drift(tmp_path, ["web"], "firebase")
        assert _entry(report, "firebase", "web").version == "^10.1.0"

    def test_lockfile_consulted_when_declaration_lacks_package(self, tmp_path: Path, write):
        write("web/package.json", _package_json({"react": "^18.2.0"}))
        write("web/yarn.lock", 'firebase@^10.1.0:\n  version "10.1.0"\n')
        report = _drift(tmp_path, ["web"], "firebase")
        entry = _entry(report, "firebase", "web")
        assert entry.version == "10.1.0"
        assert entry.manifest == "yarn.lock"

    def test_only_primary_manifest_consulted(self, tmp_path: Path, write):
        write("api/package.json", _package_json({"typescript": "5.1.0"}))
        write("api/packages/legacy/package.json", _package_json({"typescript": "4.9.5"}))
        write("web/package.json", _package_json({"typescript": "5.1.0"}))
        report = _drift(tmp_path, ["api", "web"], "typescript")
        assert report.packages[0].verdict is Verdict.MATCHED

    def test_cross_ecosystem_comparison(self, tmp_path: Path, write):
        write("api/requirements.txt", "protobuf==4.24.0\n")
        write("worker/Pipfile", '[packages]\nprotobuf = "==4.24.0"\n')
        report = _drift(tmp_path, ["api", "worker"], "protobuf")
        assert report.packages[0].verdict is Verdict.MATCHED

    def test_idempotent(self, tmp_path: Path, write):
        write("backend/package.json", _package_json({"firebase-admin": "12.0.0"}))
        write("frontend/package.json", _package_json({"firebase": "10.1.0"}))
        write("mobile/pubspec.yaml", "dependencies:\n  firebase_core: ^2.15.0\n")
        names = ["backend", "frontend", "mobile"]

        first = _drift(tmp_path, names, "firebase*", "typescript")
        second = _drift(tmp_path, names, "firebase*", "typescript")

        assert first == second
        assert json.dumps(first.to_dict()) == json.dumps(second.to_dict())


# ── reconcile() input contract and JSON shape ────────────────────────────


class TestReconcile:
    def test_empty_primaries(self):
        report = reconcile({}, [parse_tracked("firebase*")])
        assert report.codebases == ()
        assert report.packages[0].entries == ()
        assert report.packages[0].verdict is Verdict.INSUFFICIENT_DATA

    def test_to_dict_schema(self, tmp_path: Path, write):
        write("backend/package.json", _package_json({"firebase-admin": "12.0.0"}))
        write("frontend/package.json", "not json")
        report = _drift(tmp_path, ["backend", "frontend", "ios"], "firebase*")

        (row,) = report.to_dict()
        assert row["package"] == "firebase*"
        assert row["verdict"] == "INSUFFICIENT_DATA"
        backend, frontend, ios = row["entries"]
        assert backend == {
            "codebase": "backend",
            "version": "12.0.0",
            "reason": "FOUND",
            "matched": "firebase-admin",
            "manifest": "package.json",
        }
        assert frontend["reason"] == "PARSE_ERROR"
        assert frontend["version"] is None
        assert "detail" in frontend
        assert ios == {
            "codebase": "ios",
            "version": None,
            "reason": "ABSENT",
            "matched": None,
            "manifest": None,
        }

    def test_has_drift(self, tmp_path: Path, write):
        write("a/package.json", _package_json({"typescript": "5.1.0"}))
        write("b/package.json", _package_json({"typescript": "5.2.0"}))
        assert _drift(tmp_path, ["a", "b"], "typescript").has_drift
        assert not _drift(tmp_path, ["a", "b"], "react").has_drift
