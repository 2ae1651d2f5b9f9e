from spe.data_layer.models import Scenario
from spe.data_layer.scenario_registry import ScenarioRegistry


def test_blank_names_are_numbered():
    registry = ScenarioRegistry()
    assert registry.register(Scenario()) == "scenario-1"
    assert registry.register(Scenario(name="  ")) == "scenario-2"
    assert registry.get("scenario-2").name == "scenario-2"
    assert len(registry) == 2


def test_generated_name_skips_taken_names():
    registry = ScenarioRegistry()
    registry.register(Scenario())
    explicit = Scenario(name="scenario-3")
    registry.register(explicit)

    # count is 2, so the next candidate is scenario-3, which is taken
    assert registry.register(Scenario()) == "scenario-4"
    assert registry.get("scenario-3") is explicit
    assert len(registry) == 3


def test_named_scenario_replaces_same_name():
    registry = ScenarioRegistry()
    registry.register(Scenario(name="north"))
    replacement = Scenario(name="north", agents=[])
    registry.register(replacement)
    assert registry.get("north") is replacement
    assert [s.name for s in registry.list()] == ["north"]
