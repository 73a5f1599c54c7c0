"""Tests for core/registry.py: tool availability and the dependency report."""
from datetime import datetime

from core.registry import ToolRegistry
from core.workspace import Workspace


class TestAvailability:
    def test_first_word_only(self, registry_factory):
        registry = registry_factory("hachoir-metadata")
        assert registry.is_available("hachoir-metadata --quiet")
        assert not registry.is_available("hachoir")

    def test_blank_probe(self, registry_factory):
        assert not registry_factory("file").is_available("  ")

    def test_any_available(self, registry_factory):
        registry = registry_factory("scalpel")
        assert registry.any_available("foremost", "scalpel")
        assert not registry.any_available("foremost", "bulk_extractor")

    def test_catalog_defaults(self):
        registry = ToolRegistry(which=lambda name: None)
        assert "exiftool" in registry.required
        assert "stegseek" in registry.optional


class TestCheckDependencies:
    def test_report(self, registry_factory):
        registry = registry_factory("file", "sox", required=["file", "zsteg"], optional=["sox", "stegseek"])
        report = registry.check_dependencies()
        assert report.missing_required == ["zsteg"]
        assert report.missing_optional == ["stegseek"]
        assert not report.complete

    def test_complete(self, registry_factory):
        report = registry_factory("file", required=["file"]).check_dependencies()
        assert report.complete

    def test_complete_is_logged(self, registry_factory, tmp_path, target):
        registry = registry_factory("file", "sox", required=["file"], optional=["sox"])
        with Workspace.create(tmp_path, target, when=datetime(2026, 2, 2, 2, 2, 3)) as ws:
            registry.check_dependencies(ws)
            log = ws.log_path.read_text()
        assert "[INFO] All required and optional tools available" in log

    def test_writes_missing_tools_file(self, registry_factory, tmp_path, target):
        registry = registry_factory(required=["zsteg"], optional=["stegseek"])
        with Workspace.create(tmp_path, target, when=datetime(2026, 2, 2, 2, 2, 2)) as ws:
            registry.check_dependencies(ws)
            text = (ws.logs_dir / "missing_tools.txt").read_text()
            log = ws.log_path.read_text()
        assert "Missing required tools: zsteg" in text
        assert "Missing optional tools: stegseek" in text
        assert "[WARN] Required tool missing: zsteg" in log
        assert "[INFO] Optional tool missing: stegseek" in log
