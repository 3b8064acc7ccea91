"""
Unit tests for src/services/profile_resolver.py

Each resolver strategy is tested in isolation, then the chain:
- authoritative sources win and stop the chain
- non-authoritative sources only fill empty fields
- a failing source contributes nothing
- email inference supplies the default name and a best-guess department
"""

import json

import pytest

from src.services.people_directory import GooglePeopleDirectory, person_to_fields
from src.services.profile_resolver import (
    ProfileResolver,
    ResolverStrategy,
    StaffDirectoryLookup,
    build_default_strategies,
    clean_partial,
    default_name_from_email,
    infer_department,
    infer_from_email,
    load_static_profiles,
    static_table_lookup,
)


class TestEmailInference:
    def test_default_name_from_dotted_local_part(self):
        assert default_name_from_email("jane.doe@org.example") == "Jane Doe"

    @pytest.mark.parametrize("email,expected", [
        ("mary_ann-smith@org.example", "Mary Ann Smith"),
        ("JOHN.o'neil@org.example", "John O'neil"),
        ("solo@org.example", "Solo"),
        ("a..b@org.example", "A B"),
    ])
    def test_default_name_separators(self, email, expected):
        assert default_name_from_email(email) == expected

    def test_no_department_match(self):
        assert infer_department("jane.doe@org.example") == ""

    def test_es_maps_to_elementary(self):
        assert infer_department("es.coordinator@org.example") == "Elementary School"

    def test_first_pattern_wins(self):
        # "tech" is checked before "hs"
        assert infer_department("hs.tech@org.example") == "Technology"

    def test_only_local_part_is_considered(self):
        assert infer_department("jane@hr.org.example") == ""

    def test_never_guesses_job_title(self):
        fields = infer_from_email("hr.admin@org.example")

        assert "job_title" not in fields
        assert fields["department"] == "Human Resources"


class TestCleanPartial:
    def test_drops_empty_and_unknown_fields(self):
        assert clean_partial({"name": "  ", "phone": None, "shoe_size": "9", "department": "Finance"}) == {
            "department": "Finance"
        }

    def test_maps_aliases(self):
        assert clean_partial({"jobTitle": "Teacher", "full_name": "Jane Doe"}) == {
            "job_title": "Teacher",
            "name": "Jane Doe",
        }

    def test_none(self):
        assert clean_partial(None) == {}


class TestStaticTable:
    def test_exact_email_lookup(self):
        lookup = static_table_lookup({"jane.doe@org.example": {"name": "Jane Q. Doe", "job_title": "Teacher"}})

        assert lookup("jane.doe@org.example") == {"name": "Jane Q. Doe", "job_title": "Teacher"}
        assert lookup("JANE.DOE@org.example") == {}

    def test_load_static_profiles(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps({
            "jane.doe@org.example": {"name": "Jane Doe", "department": "Science", "phone": ""},
        }))

        assert load_static_profiles(str(path)) == {
            "jane.doe@org.example": {"name": "Jane Doe", "department": "Science"},
        }

    def test_missing_file_is_empty_table(self, tmp_path):
        assert load_static_profiles(str(tmp_path / "missing.json")) == {}
        assert load_static_profiles("") == {}


class TestStaffDirectoryLookup:
    def test_reads_directory_tab(self, sheets):
        sheets.add_tab("roles-sheet", "Staff Directory", [
            ["Email", "Full Name", "Job Title", "Department", "Phone"],
            ["jane.doe@org.example", "Jane Doe", "Grade 2 Teacher", "Elementary School", "555-0100"],
            ["sam@org.example", "Sam Lee"],
        ])
        lookup = StaffDirectoryLookup(sheets, sheet_id="roles-sheet", tab_name="Staff Directory")

        assert lookup("jane.doe@org.example") == {
            "name": "Jane Doe",
            "job_title": "Grade 2 Teacher",
            "department": "Elementary School",
            "phone": "555-0100",
        }
        assert lookup("sam@org.example") == {"name": "Sam Lee"}
        assert lookup("nobody@org.example") == {}


class TestPeopleDirectory:
    PERSON = {
        "names": [{"displayName": "Jane Doe"}],
        "emailAddresses": [{"value": "Jane.Doe@org.example"}],
        "organizations": [{"title": "Grade 2 Teacher", "department": "Elementary School"}],
        "phoneNumbers": [{"value": "555-0100"}],
    }

    def test_person_to_fields(self):
        assert person_to_fields(self.PERSON) == {
            "name": "Jane Doe",
            "job_title": "Grade 2 Teacher",
            "department": "Elementary School",
            "phone": "555-0100",
        }

    def test_person_without_organization(self):
        assert person_to_fields({"names": [{"displayName": "Jane Doe"}]}) == {"name": "Jane Doe"}

    def test_search_directory_picks_exact_email(self, mocker):
        service = mocker.MagicMock()
        other = {"names": [{"displayName": "Jane Doering"}], "emailAddresses": [{"value": "jane.doering@org.example"}]}
        service.people.return_value.searchDirectoryPeople.return_value.execute.return_value = {
            "people": [other, self.PERSON]
        }

        fields = GooglePeopleDirectory(service=service).search_directory("jane.doe@org.example")

        assert fields["name"] == "Jane Doe"
        kwargs = service.people.return_value.searchDirectoryPeople.call_args.kwargs
        assert kwargs["query"] == "jane.doe@org.example"
        assert "organizations" in kwargs["readMask"]

    def test_search_contacts_no_match(self, mocker):
        service = mocker.MagicMock()
        service.people.return_value.searchContacts.return_value.execute.return_value = {}

        assert GooglePeopleDirectory(service=service).search_contacts("jane.doe@org.example") == {}


class TestProfileResolver:
    def test_inferred_profile_without_matches(self, events):
        resolver = ProfileResolver(build_default_strategies(static_profiles={}), events=events)

        profile = resolver.resolve("jane.doe@org.example")

        assert profile.email == "jane.doe@org.example"
        assert profile.name == "Jane Doe"
        assert profile.department == ""
        assert profile.job_title == ""
        assert profile.source == "email_inference"

    def test_inferred_department(self, events):
        resolver = ProfileResolver(build_default_strategies(static_profiles={}), events=events)

        profile = resolver.resolve("es.coordinator@org.example")

        assert profile.department == "Elementary School"
        assert profile.name == "Es Coordinator"

    def test_authoritative_source_wins_and_stops_chain(self, mocker, events):
        later = mocker.Mock(return_value={"name": "Wrong Name", "phone": "555-9999"})
        resolver = ProfileResolver([
            ResolverStrategy("static_table", static_table_lookup({
                "jane.doe@org.example": {"name": "Jane Q. Doe", "job_title": "Dean"},
            }), authoritative=True),
            ResolverStrategy("contacts", later),
        ], events=events)

        profile = resolver.resolve("jane.doe@org.example")

        assert profile.name == "Jane Q. Doe"
        assert profile.job_title == "Dean"
        assert profile.phone == ""
        assert profile.source == "static_table"
        later.assert_not_called()

    def test_non_authoritative_sources_fill_only_empty_fields(self, events):
        resolver = ProfileResolver([
            ResolverStrategy("contacts", lambda email: {"name": "Jane Doe", "phone": "555-0100"}),
            ResolverStrategy("people_directory", lambda email: {
                "name": "J. Doe",
                "job_title": "Grade 2 Teacher",
                "department": "Elementary School",
            }),
            ResolverStrategy("email_inference", infer_from_email),
        ], events=events)

        profile = resolver.resolve("jane.doe@org.example")

        assert profile.name == "Jane Doe"
        assert profile.phone == "555-0100"
        assert profile.job_title == "Grade 2 Teacher"
        assert profile.department == "Elementary School"
        assert profile.source == "contacts+people_directory"

    def test_stops_once_profile_is_complete(self, mocker, events):
        later = mocker.Mock(return_value={})
        resolver = ProfileResolver([
            ResolverStrategy("contacts", lambda email: {
                "name": "Jane Doe",
                "job_title": "Teacher",
                "department": "Science",
                "phone": "555-0100",
            }),
            ResolverStrategy("people_directory", later),
        ], events=events)

        resolver.resolve("jane.doe@org.example")

        later.assert_not_called()

    def test_failing_source_is_skipped(self, events, captured_events):
        def broken(email):
            raise PermissionError("Contacts scope not granted")

        resolver = ProfileResolver([
            ResolverStrategy("contacts", broken),
            ResolverStrategy("people_directory", lambda email: {"job_title": "Counselor"}),
            ResolverStrategy("email_inference", infer_from_email),
        ], events=events)

        profile = resolver.resolve("jane.doe@org.example")

        assert profile.job_title == "Counselor"
        assert profile.name == "Jane Doe"
        failures = [event for event in captured_events if event.event == "profile_source_failed"]
        assert len(failures) == 1
        assert failures[0].metadata == {"source": "contacts"}

    def test_empty_chain_still_has_default_name(self, events):
        profile = ProfileResolver([], events=events).resolve("sam.lee@org.example")

        assert profile.name == "Sam Lee"
        assert profile.source == "email"

    def test_emits_resolved_event(self, events, captured_events):
        ProfileResolver([ResolverStrategy("email_inference", infer_from_email)], events=events).resolve(
            "jane.doe@org.example"
        )

        assert captured_events[-1].event == "profile_resolved"
        assert captured_events[-1].metadata["source"] == "email_inference"
        assert set(captured_events[-1].metadata["empty_fields"]) == {"job_title", "department", "phone"}


class TestDefaultStrategies:
    def test_order_with_all_sources(self, sheets, mocker):
        strategies = build_default_strategies(store=sheets, people_directory=mocker.Mock(), static_profiles={})

        assert [strategy.name for strategy in strategies] == [
            "static_table",
            "staff_directory",
            "contacts",
            "people_directory",
            "email_inference",
        ]
        assert [strategy.authoritative for strategy in strategies] == [True, True, False, False, False]

    def test_unconfigured_sources_are_left_out(self):
        strategies = build_default_strategies(static_profiles={})

        assert [strategy.name for strategy in strategies] == ["static_table", "email_inference"]

    def test_staff_directory_outage_falls_through(self, sheets, events):
        # No "Staff Directory" tab in the store
        resolver = ProfileResolver(build_default_strategies(store=sheets, static_profiles={}), events=events)

        profile = resolver.resolve("jane.doe@org.example")

        assert profile.name == "Jane Doe"
        assert profile.source == "email_inference"
