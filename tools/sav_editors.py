# sav_editors.py - Crafting recipe and player stats editors over a SaveDocument
import logging
import os

import yaml

from sav_document import asset_id, friendly_name

log = logging.getLogger(__name__)

SCHEMA_VERSION = "1.0.0"


# Load document locations from schema.yaml
def load_schema():
    """Load editor paths, stat names and naming rules from schema.yaml."""
    global SCHEMA_VERSION
    schema_path = os.path.join(os.path.dirname(__file__), "schema.yaml")
    with open(schema_path, "r", encoding="utf-8") as f:
        schema = yaml.safe_load(f)

    SCHEMA_VERSION = schema.get("version", "1.0.0")
    return schema


SCHEMA = load_schema()
PATHS = SCHEMA["paths"]
NAMES = SCHEMA["names"]


def item_name(path):
    return friendly_name(path, prefixes=(NAMES["item_prefix"],), empty=NAMES["unknown_item"])


def recipe_name(path):
    return friendly_name(path, prefixes=(NAMES["recipe_prefix"],), empty=NAMES["unknown_recipe"])


def item_category(path):
    """Category from folder markers in the asset path, "Other" if none match."""
    if not path:
        return "Other"
    for category in SCHEMA.get("categories", []):
        if any(marker in path for marker in category["markers"]):
            return category["name"]
    return "Other"


class RecipeItem:
    def __init__(self, item_path, count=0):
        self.item_path = item_path
        self.count = count
        self.loaded_count = count

    @property
    def changed(self):
        return self.count != self.loaded_count

    @property
    def friendly_name(self):
        return item_name(self.item_path)

    @property
    def item_id(self):
        return asset_id(self.item_path)

    @property
    def category(self):
        return item_category(self.item_path)


class LockedRecipe:
    def __init__(self, recipe_path, items=None):
        self.recipe_path = recipe_path
        self.items = items or []
        self.marked_for_unlock = False

    @property
    def friendly_name(self):
        return recipe_name(self.recipe_path)

    @property
    def recipe_id(self):
        return asset_id(self.recipe_path)

    @property
    def items_summary(self):
        required = [item for item in self.items if item.count > 0]
        if not required:
            return "No items required"
        return ", ".join(f"{item.friendly_name}: {item.count}" for item in required)


def _as_int(value):
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return 0


class CraftingEditor:
    """Locked crafting recipes.

    Removing a recipe from the locked set is what unlocks it in game, so
    apply() deletes every marked recipe and writes item counts back for the
    rest. Only counts edited since load() are written, so values the editor
    could not parse are left as they are. Nothing touches the document until
    apply().
    """

    def __init__(self, document):
        self.document = document
        self.recipes = []
        self.status_message = ""

    def load(self):
        self.recipes = []
        locked = self.document.lookup(PATHS["locked_recipes"])
        if not isinstance(locked, dict):
            self.status_message = "No locked recipes found in save file"
            return self.recipes

        for recipe_path, entry in locked.items():
            items = []
            entries = entry.get("items") if isinstance(entry, dict) else None
            for node in entries if isinstance(entries, list) else []:
                if not isinstance(node, dict):
                    node = {}
                item = node.get("item")
                items.append(RecipeItem(item if isinstance(item, str) else "", _as_int(node.get("count"))))
            self.recipes.append(LockedRecipe(recipe_path, items))

        self.recipes.sort(key=lambda r: r.friendly_name)
        self.status_message = f"Loaded {len(self.recipes)} locked recipes"
        log.debug(self.status_message)
        return self.recipes

    @property
    def total_count(self):
        return len(self.recipes)

    @property
    def marked_count(self):
        return sum(1 for r in self.recipes if r.marked_for_unlock)

    def filter(self, search=""):
        search = (search or "").strip().lower()
        if not search:
            return list(self.recipes)
        return [r for r in self.recipes
                if search in r.friendly_name.lower() or search in r.recipe_id.lower()]

    def find(self, key):
        """Recipe by full path, id or friendly name (case-insensitive)."""
        lowered = key.lower()
        for recipe in self.recipes:
            if key == recipe.recipe_path:
                return recipe
        for recipe in self.recipes:
            if lowered in (recipe.recipe_id.lower(), recipe.friendly_name.lower()):
                return recipe
        return None

    def mark_for_unlock(self, keys):
        """Mark recipes for unlock. Returns the keys that matched nothing."""
        missing = []
        for key in keys:
            recipe = self.find(key)
            if recipe is None:
                missing.append(key)
            else:
                recipe.marked_for_unlock = True
        return missing

    def unlock_all(self):
        for recipe in self.recipes:
            recipe.marked_for_unlock = True

    def unlock_none(self):
        for recipe in self.recipes:
            recipe.marked_for_unlock = False

    def zero_counts(self, recipe):
        for item in recipe.items:
            item.count = 0

    def apply(self):
        """Write edits into the document. Returns the unlocked recipe paths."""
        locked = self.document.lookup(PATHS["locked_recipes"])
        if not isinstance(locked, dict):
            return []

        marked = [r.recipe_path for r in self.recipes if r.marked_for_unlock]
        removed = self.document.remove_keys(PATHS["locked_recipes"], marked)

        for recipe in self.recipes:
            if recipe.marked_for_unlock:
                continue
            entries = self.document.lookup(PATHS["locked_recipes"] + [recipe.recipe_path, "items"])
            if not isinstance(entries, list):
                continue
            for i, (node, item) in enumerate(zip(entries, recipe.items)):
                if not isinstance(node, dict) or not item.changed:
                    continue
                if self.document.set(PATHS["locked_recipes"] + [recipe.recipe_path, "items", i, "count"], item.count):
                    item.loaded_count = item.count

        self.recipes = [r for r in self.recipes if not r.marked_for_unlock]
        if removed:
            log.info("Unlocked %d recipes", len(removed))
        return removed


class SkillProgress:
    def __init__(self, skill_name, level=0, experience=0.0):
        self.skill_name = skill_name
        self.level = level
        self.experience = experience
        self.loaded = self.values()

    def values(self):
        return {"level": self.level, "experience": self.experience}


class SurvivalStat:
    def __init__(self, stat_name, current=0.0, minimum=0.0, maximum=0.0):
        self.stat_name = stat_name
        self.current = current
        self.min = minimum
        self.max = maximum
        self.loaded = self.values()

    def values(self):
        return {"current": self.current, "min": self.min, "max": self.max}


def _edited(values, loaded):
    """Keys whose value differs from what load() read."""
    return {key: value for key, value in values.items() if value != loaded.get(key)}


def _as_float(value, default=0.0):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    return default


class StatsEditor:
    """Skill progression and survival values of the first player in the save."""

    def __init__(self, document):
        self.document = document
        self.player_id = None
        self.skills = []
        self.survival_stats = []
        self.status_message = "No player data loaded"

    def _player_path(self):
        return PATHS["players"] + [self.player_id]

    def load(self):
        self.player_id = None
        self.skills = []
        self.survival_stats = []

        players = self.document.lookup(PATHS["players"])
        if not isinstance(players, dict) or not players:
            self.status_message = "No player data found in save file"
            return False

        self.player_id = next(iter(players))
        skills_node = self.document.lookup(self._player_path() + PATHS["skills"])
        survival_node = self.document.lookup(self._player_path() + PATHS["survival"])

        for name in SCHEMA["skills"]:
            entry = _find_skill(skills_node, name)
            if entry is None:
                self.skills.append(SkillProgress(name))
            else:
                self.skills.append(SkillProgress(name, _as_int(entry.get("level")),
                                                 _as_float(entry.get("experience"))))

        for name in SCHEMA["survival_stats"]:
            stat = survival_node.get(name) if isinstance(survival_node, dict) else None
            if not isinstance(stat, dict):
                stat = {}
            self.survival_stats.append(SurvivalStat(name, _as_float(stat.get("current")),
                                                    _as_float(stat.get("min")),
                                                    _as_float(stat.get("max"))))

        self.status_message = f"Loaded stats for {self.player_id}"
        return True

    def skill(self, name):
        for skill in self.skills:
            if skill.skill_name.lower() == name.lower():
                return skill
        return None

    def stat(self, name):
        for stat in self.survival_stats:
            if stat.stat_name.lower() == name.lower():
                return stat
        return None

    def apply(self):
        """Write edited skills and stats into the document.

        Existing entries get only the fields edited since load(). Missing
        skill entries are appended and missing stat objects inserted.
        Returns True if the document changed.
        """
        if self.player_id is None:
            return False
        changed = False

        skills_path = self._player_path() + PATHS["skills"]
        skills_node = self.document.lookup(skills_path)
        if isinstance(skills_node, list):
            for skill in self.skills:
                entry = _find_skill(skills_node, skill.skill_name)
                if entry is None:
                    skills_node.append(dict(skill=skill.skill_name, **skill.values()))
                else:
                    edits = _edited(skill.values(), skill.loaded)
                    if not edits:
                        continue
                    entry.update(edits)
                skill.loaded = skill.values()
                self.document.mark_modified(skills_path)
                changed = True

        survival_path = self._player_path() + PATHS["survival"]
        if isinstance(self.document.lookup(survival_path), dict):
            for stat in self.survival_stats:
                stat_path = survival_path + [stat.stat_name]
                node = self.document.lookup(stat_path)
                if not isinstance(node, dict):
                    changed |= self.document.set(stat_path, stat.values())
                else:
                    for key, value in _edited(stat.values(), stat.loaded).items():
                        changed |= self.document.set(stat_path + [key], value)
                stat.loaded = stat.values()

        if changed:
            log.debug("Updated stats for %s", self.player_id)
        return changed


def _find_skill(skills_node, name):
    if not isinstance(skills_node, list):
        return None
    for entry in skills_node:
        if isinstance(entry, dict) and entry.get("skill") == name:
            return entry
    return None
