import pytest

from csdl_to_code.pipeline import GenerationOptions


def test_from_dict_reads_known_options():
    options = GenerationOptions.from_dict({"emit_serialization_support": False, "unknown_option": "ignored"})

    assert options.emit_serialization_support is False
    assert options.emit_reflection_metadata is True
    assert not hasattr(options, "unknown_option")


def test_from_dict_rejects_non_boolean_values():
    with pytest.raises(ValueError, match="emit_serialization_support"):
        GenerationOptions.from_dict({"emit_serialization_support": "false"})


def test_to_dict_round_trips():
    options = GenerationOptions(include_navigation_properties=False)
    assert GenerationOptions.from_dict(options.to_dict()) == options
