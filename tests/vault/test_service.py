"""Tests for VaultService: capture, breakdown and archive policy."""

import asyncio
from datetime import date
from pathlib import Path

from paravault.vault import operations as ops
from paravault.vault.archive import ArchivePolicy
from paravault.vault.models import (
    ArchivedProjectEntry,
    Category,
    ProjectUpdate,
    RegularEntry,
)
from paravault.vault.service import VaultService
from paravault.vault.store import VaultStore

DAY = date(2024, 1, 1)


def _service(tmp_path: Path, fakes, **kwargs) -> VaultService:
    return VaultService(VaultStore(tmp_path), fakes.bundle(), **kwargs)


class TestCapture:
    def test_link_becomes_resource(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes)
        entry = asyncio.run(service.capture("https://example.com/page", on_date=DAY))

        assert isinstance(entry, RegularEntry)
        assert entry.category == Category.RESOURCES
        assert entry.link_metadata.domain == "example.com"
        assert entry.link_metadata.display_title == "Example page"
        assert entry.link_metadata.slug == "example-page"
        assert not fakes.called("classify")

    def test_failed_summary_falls_back_to_classifier(self, tmp_path: Path, fakes):
        fakes.fail_summary = True
        fakes.category = Category.PROJECTS
        service = _service(tmp_path, fakes)
        entry = asyncio.run(service.capture("https://example.com/page", on_date=DAY))

        assert entry.link_metadata is None
        assert entry.category == Category.PROJECTS
        assert ("classify", "https://example.com/page") in fakes.calls

    def test_text_is_classified(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes)
        entry = asyncio.run(service.capture("  Renew passport  ", on_date=DAY))
        assert entry.title == "Renew passport"
        assert entry.category == Category.AREAS
        assert entry.date == DAY

    def test_hostless_link_is_classified_as_text(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes)
        entry = asyncio.run(service.capture("http://www.", on_date=DAY))
        assert entry.link_metadata is None
        assert entry.category == Category.AREAS
        assert not fakes.called("summarize")

    def test_manual_category_wins(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes)
        entry = asyncio.run(
            service.capture("Renew passport", on_date=DAY, manual_category=Category.PROJECTS)
        )
        assert entry.category == Category.PROJECTS
        assert fakes.calls == []

    def test_classifier_outage_uses_configured_fallback(self, tmp_path: Path, fakes):
        fakes.fail_classify = True
        service = _service(tmp_path, fakes, fallback_category=Category.AREAS)
        entry = asyncio.run(service.capture("Renew passport", on_date=DAY))
        assert entry.category == Category.AREAS

    def test_blank_input_is_ignored(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes)
        assert asyncio.run(service.capture("   ", on_date=DAY)) is None
        assert service.state.entries == []
        assert fakes.calls == []

    def test_capture_is_persisted(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes)
        entry = asyncio.run(service.capture("Renew passport", on_date=DAY))
        reloaded = VaultStore(tmp_path).load()
        assert [e.id for e in reloaded.entries] == [entry.id]

    def test_custom_favicon_template(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes, favicon_template="https://icons.test/{domain}.ico")
        entry = asyncio.run(service.capture("https://www.example.com", on_date=DAY))
        assert entry.link_metadata.favicon == "https://icons.test/example.com.ico"


class TestEntries:
    def test_toggle_and_delete(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes)
        entry = asyncio.run(service.capture("Water plants", on_date=DAY))
        service.toggle_entry(entry.id)
        assert ops.find_entry(service.state, entry.id).completed is True
        service.delete_entry(entry.id)
        assert VaultStore(tmp_path).load().entries == []


class TestCreateProject:
    def test_uses_generated_slug(self, tmp_path: Path, fakes):
        fakes.slug = "spring-garden"
        service = _service(tmp_path, fakes)
        project = asyncio.run(service.create_project("Garden", seed_items="Dig, Plant"))
        assert project.slug == "spring-garden"
        assert [i.title for i in project.items] == ["Dig", "Plant"]
        assert ("slug", "Garden") in fakes.calls

    def test_slug_failure_uses_local_slug(self, tmp_path: Path, fakes):
        fakes.fail_slug = True
        service = _service(tmp_path, fakes)
        project = asyncio.run(service.create_project("Spring Garden"))
        assert project.slug.startswith("spring-garden-")

    def test_blank_title_rejected(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes)
        assert asyncio.run(service.create_project("  ")) is None
        assert service.state.projects == []

    def test_update_project(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes)
        project = asyncio.run(service.create_project("Garden"))
        service.update_project(project.id, ProjectUpdate(description="Beds and herbs"))
        assert VaultStore(tmp_path).load().projects[0].description == "Beds and herbs"


class TestBreakdown:
    def test_appends_steps_in_order(self, tmp_path: Path, fakes):
        fakes.steps = ["Outline", "", "Draft", "Edit"]
        service = _service(tmp_path, fakes)
        project = asyncio.run(service.create_project("Essay", seed_items="Pick topic"))
        added = asyncio.run(service.breakdown_project(project.id))

        assert [i.title for i in added] == ["Outline", "Draft", "Edit"]
        items = ops.find_project(service.state, project.id).items
        assert [i.title for i in items] == ["Pick topic", "Outline", "Draft", "Edit"]

    def test_failure_adds_nothing(self, tmp_path: Path, fakes):
        fakes.fail_decompose = True
        service = _service(tmp_path, fakes)
        project = asyncio.run(service.create_project("Essay", seed_items="Pick topic"))
        assert asyncio.run(service.breakdown_project(project.id)) == []
        assert len(ops.find_project(service.state, project.id).items) == 1

    def test_empty_suggestions(self, tmp_path: Path, fakes):
        fakes.steps = []
        service = _service(tmp_path, fakes)
        project = asyncio.run(service.create_project("Essay"))
        assert asyncio.run(service.breakdown_project(project.id)) == []

    def test_unknown_project(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes)
        assert asyncio.run(service.breakdown_project("missing")) == []
        assert not fakes.called("decompose")


class TestArchivePolicy:
    def _finish(self, service: VaultService) -> str:
        project = asyncio.run(service.create_project("Trip", seed_items="Book, Pack"))
        for item in project.items:
            service.toggle_item(project.id, item.id)
        return project.id

    def test_manual_policy_hides_but_keeps(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes, archive_policy=ArchivePolicy.MANUAL)
        project_id = self._finish(service)
        assert ops.find_project(service.state, project_id) is not None
        assert service.state.entries == []

        service.archive_project(project_id)
        assert ops.find_project(service.state, project_id) is None
        assert isinstance(service.state.entries[0], ArchivedProjectEntry)

    def test_on_complete_policy_archives_on_last_item(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes, archive_policy=ArchivePolicy.ON_COMPLETE)
        project_id = self._finish(service)
        assert ops.find_project(service.state, project_id) is None
        record = service.state.entries[0]
        assert isinstance(record, ArchivedProjectEntry)
        assert [i.title for i in record.archived_items] == ["Book", "Pack"]
        assert VaultStore(tmp_path).load() == service.state

    def test_archive_incomplete_needs_force(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes)
        project = asyncio.run(service.create_project("Trip", seed_items="Book"))
        service.archive_project(project.id)
        assert ops.find_project(service.state, project.id) is not None
        service.archive_project(project.id, force=True)
        assert ops.find_project(service.state, project.id) is None


class TestItems:
    def test_add_update_remove(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes)
        project = asyncio.run(service.create_project("Trip"))
        item = service.add_item(project.id, "Book flights", deadline=DAY)
        assert item.deadline == DAY

        service.update_item(project.id, item.model_copy(update={"title": "Book trains"}))
        assert ops.find_project(service.state, project.id).items[0].title == "Book trains"

        service.remove_item(project.id, item.id)
        assert ops.find_project(service.state, project.id).items == []

    def test_add_to_unknown_project(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes)
        assert service.add_item("missing", "x") is None

    def test_noop_does_not_write(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes)
        service.remove_item("missing", "missing")
        assert not VaultStore(tmp_path).path.exists()

    def test_unknown_item_does_not_rewrite_store(self, tmp_path: Path, fakes):
        service = _service(tmp_path, fakes)
        project = asyncio.run(service.create_project("Trip", seed_items="Book"))
        store_path = VaultStore(tmp_path).path
        store_path.unlink()

        service.remove_item(project.id, "missing")
        service.toggle_item(project.id, "missing")
        assert not store_path.exists()
