# sav_to_yaml.py - Write a human-readable YAML report of a .sav file
import sys
import os
import yaml
from datetime import datetime, timezone

import sav_editors
from sav_document import SaveDocument

TOOL_VERSION = "1.0.0"

# Custom list type for flow-style output
class FlowList(list):
    """List that will be dumped in flow style."""
    pass

def represent_flow_list(dumper, data):
    return dumper.represent_sequence('tag:yaml.org,2002:seq', data, flow_style=True)

yaml.add_representer(FlowList, represent_flow_list)

def build_recipes(crafting):
    """One entry per locked recipe, with the items it still requires."""
    recipes = []
    for recipe in crafting.recipes:
        entry = {
            "name": recipe.friendly_name,
            "id": recipe.recipe_id,
        }
        items = []
        for item in recipe.items:
            items.append(FlowList([item.friendly_name, item.count]))
        if items:
            entry["items"] = items
        recipes.append(entry)
    return recipes

def build_player(stats):
    """Skills and survival stats of the first player, or None without one."""
    if stats.player_id is None:
        return None

    skills = {}
    for skill in stats.skills:
        skills[skill.skill_name] = {"level": skill.level, "experience": skill.experience}

    survival = {}
    for stat in stats.survival_stats:
        # current / min / max
        survival[stat.stat_name] = FlowList([stat.current, stat.min, stat.max])

    return {
        "id": stats.player_id,
        "skills": skills,
        "survival": survival
    }

def sav_to_yaml_data(sav_path):
    """Build the report structure for a save file.

    Args:
        sav_path: Path to the .sav file
    """
    document = SaveDocument.load(sav_path)

    crafting = sav_editors.CraftingEditor(document)
    crafting.load()
    stats = sav_editors.StatsEditor(document)
    stats.load()

    # Build result with explicit ordering
    result = {}

    result["metadata"] = {
        "schema_version": sav_editors.SCHEMA_VERSION,
        "tool_version": TOOL_VERSION,
        "generated_at": datetime.now(timezone.utc).isoformat()
    }

    result["file"] = {
        "name": os.path.basename(sav_path),
        "declared_size": document.expected_size,
        "decompressed_size": document.actual_size,
        "json": document.summary()
    }
    if document.size_mismatch:
        result["file"]["size_mismatch"] = True

    result["locked_recipes"] = build_recipes(crafting)

    player = build_player(stats)
    if player:
        result["player"] = player

    return result

def sav_to_yaml(sav_path, yaml_path):
    """Convert a .sav file to a YAML report. The report is never read back."""
    data = sav_to_yaml_data(sav_path)

    yaml_text = yaml.dump(data, allow_unicode=True, default_flow_style=False, sort_keys=False)

    with open(yaml_path, "w", encoding="utf-8") as f:
        f.write(yaml_text)

    print(f"Converted {sav_path} -> {yaml_path}")

def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) < 1:
        print("Usage: python sav_to_yaml.py input.sav [output.yaml]")
        print("       If output.yaml is omitted, uses input name with .yaml extension")
        return 1

    sav_path = argv[0]
    if len(argv) >= 2:
        yaml_path = argv[1]
    else:
        yaml_path = sav_path.rsplit(".", 1)[0] + ".yaml"

    sav_to_yaml(sav_path, yaml_path)
    return 0

if __name__ == "__main__":
    sys.exit(main())
