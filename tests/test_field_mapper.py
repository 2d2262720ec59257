"""
Tests for the ECS field mapping table.
"""

import pytest

from sigma2kql.core.field_mapper import ECS_FIELD_MAP, FieldMapper, resolve


class TestResolve:

    @pytest.mark.parametrize("sigma_field,ecs_field", [
        ("Image", "process.executable"),
        ("image", "process.executable"),
        ("IMAGE", "process.executable"),
        ("CommandLine", "process.command_line"),
        ("ParentImage", "process.parent.executable"),
        ("TargetFilename", "file.path"),
        ("DestinationIp", "destination.ip"),
        ("TargetObject", "registry.path"),
        ("EventID", "winlog.event_id"),
        ("eventName", "event.action"),
        ("QueryName", "dns.question.name"),
    ])
    def test_known_fields(self, sigma_field, ecs_field):
        assert resolve(sigma_field) == ecs_field

    def test_unknown_field_passes_through(self):
        assert resolve("MyCustomField") == "MyCustomField"

    def test_target_names_map_to_themselves(self):
        for target in set(ECS_FIELD_MAP.values()):
            assert resolve(target) == target

    def test_resolve_is_stable(self):
        for name in ("Image", "SubjectUserName", "FailureCode", "Unknown.Thing"):
            assert resolve(resolve(name)) == resolve(name)

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            ECS_FIELD_MAP['image'] = 'something.else'


class TestFieldMapper:

    def test_default_table(self):
        assert FieldMapper().resolve("Image") == "process.executable"

    def test_overrides_do_not_touch_shared_table(self):
        mapper = FieldMapper({'Image': 'custom.image'})

        assert mapper.resolve("image") == "custom.image"
        assert mapper.resolve("CommandLine") == "process.command_line"
        assert resolve("Image") == "process.executable"
