# sav_edit.py - Command-line save editor (recipes, stats, raw JSON paths)
import sys
import logging
import argparse

import sav_codec
import sav_editors
from sav_document import ABSENT, SaveDocument, split_path


def parse_value(text):
    """JSON literal if it parses (5, 1.5, true, null, {...}), else a plain string."""
    try:
        return sav_codec.parse_text(text)
    except sav_codec.ParseError:
        return text


def save_document(document, args):
    backup = document.save(args.output or document.path, backup=not args.no_backup)
    if backup:
        print(f"Saved {document.path} (backup: {backup})")
    else:
        print(f"Saved {document.path}")


def cmd_info(args):
    document = SaveDocument.load(args.save)
    print(f"File:          {document.path}")
    print(f"Declared size: {document.expected_size}")
    print(f"Decompressed:  {document.actual_size}")
    if document.size_mismatch:
        print("Warning: decompressed size does not match the header")
    print(f"JSON:          {document.summary()}")


def cmd_get(args):
    document = SaveDocument.load(args.save)
    value = document.lookup(args.path)
    if value is ABSENT:
        print('NOT_FOUND', file=sys.stderr)
        return 1
    if isinstance(value, (dict, list)):
        print(sav_codec.to_json_text(value, pretty=True))
    else:
        print(sav_codec.to_json_text(value))
    return 0


def cmd_set(args):
    document = SaveDocument.load(args.save)
    if not document.set(args.path, parse_value(args.value)):
        print(f"Error: cannot set {args.path}", file=sys.stderr)
        return 1
    save_document(document, args)
    return 0


def cmd_delete(args):
    document = SaveDocument.load(args.save)
    segments = split_path(args.path)
    if not segments or not document.delete_key(segments[:-1], str(segments[-1])):
        print('NOT_FOUND', file=sys.stderr)
        return 1
    save_document(document, args)
    return 0


def cmd_recipes(args):
    document = SaveDocument.load(args.save)
    crafting = sav_editors.CraftingEditor(document)
    crafting.load()
    for recipe in crafting.filter(args.search):
        print(f"{recipe.recipe_id}\t{recipe.friendly_name}\t{recipe.items_summary}")
    print(crafting.status_message, file=sys.stderr)
    return 0


def cmd_unlock(args):
    document = SaveDocument.load(args.save)
    crafting = sav_editors.CraftingEditor(document)
    crafting.load()
    if args.all:
        crafting.unlock_all()
    else:
        missing = crafting.mark_for_unlock(args.recipes)
        for key in missing:
            print(f"Warning: recipe '{key}' not found", file=sys.stderr)
    removed = crafting.apply()
    if not removed:
        print("Nothing to unlock")
        return 1
    for path in removed:
        print(f"Unlocked {path}")
    save_document(document, args)
    return 0


def cmd_set_count(args):
    document = SaveDocument.load(args.save)
    crafting = sav_editors.CraftingEditor(document)
    crafting.load()
    recipe = crafting.find(args.recipe)
    if recipe is None:
        print(f"Error: recipe '{args.recipe}' not found", file=sys.stderr)
        return 1
    if args.item is None and args.count == 0:
        crafting.zero_counts(recipe)
    else:
        matched = recipe.items
        if args.item is not None:
            wanted = args.item.lower()
            matched = [i for i in recipe.items if wanted in (i.item_id.lower(), i.friendly_name.lower())]
        if not matched:
            print(f"Error: item '{args.item}' not required by {recipe.friendly_name}", file=sys.stderr)
            return 1
        for item in matched:
            item.count = args.count
    crafting.apply()
    print(f"{recipe.friendly_name}: {recipe.items_summary}")
    save_document(document, args)
    return 0


def cmd_stats(args):
    document = SaveDocument.load(args.save)
    stats = sav_editors.StatsEditor(document)
    if not stats.load():
        print(stats.status_message, file=sys.stderr)
        return 1
    print(f"Player {stats.player_id}")
    for skill in stats.skills:
        print(f"  {skill.skill_name}\tlevel={skill.level}\texperience={skill.experience}")
    for stat in stats.survival_stats:
        print(f"  {stat.stat_name}\tcurrent={stat.current}\tmin={stat.min}\tmax={stat.max}")
    return 0


def cmd_set_skill(args):
    document = SaveDocument.load(args.save)
    stats = sav_editors.StatsEditor(document)
    skill = stats.skill(args.skill) if stats.load() else None
    if skill is None:
        print(f"Error: unknown skill '{args.skill}'", file=sys.stderr)
        return 1
    skill.level = args.level
    if args.experience is not None:
        skill.experience = args.experience
    if not stats.apply():
        print(f"Nothing changed for {skill.skill_name}", file=sys.stderr)
        return 1
    save_document(document, args)
    return 0


def cmd_set_stat(args):
    document = SaveDocument.load(args.save)
    stats = sav_editors.StatsEditor(document)
    stat = stats.stat(args.stat) if stats.load() else None
    if stat is None:
        print(f"Error: unknown survival stat '{args.stat}'", file=sys.stderr)
        return 1
    stat.current = args.current
    if args.min is not None:
        stat.min = args.min
    if args.max is not None:
        stat.max = args.max
    if not stats.apply():
        print(f"Nothing changed for {stat.stat_name}", file=sys.stderr)
        return 1
    save_document(document, args)
    return 0


def cmd_export(args):
    document = SaveDocument.load(args.save)
    json_path = args.output or args.save.rsplit(".", 1)[0] + ".json"
    document.export_json(json_path, pretty=not args.compact)
    print(f"Exported {args.save} -> {json_path}")
    return 0


def build_parser():
    ap = argparse.ArgumentParser(description='Save editor for zlib-compressed JSON .sav files')
    ap.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    sub = ap.add_subparsers(dest='cmd', required=True)

    def add(name, func, help, writes=False):
        p = sub.add_parser(name, help=help)
        p.add_argument('save', help='.sav file path')
        if writes:
            p.add_argument('-o', '--output', help='Write to this path instead of overwriting the input')
            p.add_argument('--no-backup', action='store_true', help='Do not copy the original to <path>.backup')
        p.set_defaults(func=func)
        return p

    add('info', cmd_info, 'Show header sizes and JSON summary')

    p = add('get', cmd_get, 'Print the value at a dotted path')
    p.add_argument('path', help='Dotted path, e.g. itemData.GameStateData')

    p = add('set', cmd_set, 'Set the value at a dotted path', writes=True)
    p.add_argument('path', help='Dotted path')
    p.add_argument('value', help='JSON literal, or plain text for a string')

    p = add('delete', cmd_delete, 'Delete the member at a dotted path', writes=True)
    p.add_argument('path', help='Dotted path')

    p = add('recipes', cmd_recipes, 'List locked recipes')
    p.add_argument('--search', default='', help='Filter by name or id')

    p = add('unlock', cmd_unlock, 'Unlock recipes', writes=True)
    p.add_argument('recipes', nargs='*', help='Recipe ids, names or paths')
    p.add_argument('--all', action='store_true', help='Unlock every locked recipe')

    p = add('set-count', cmd_set_count, 'Set item counts required by a locked recipe', writes=True)
    p.add_argument('recipe', help='Recipe id, name or path')
    p.add_argument('count', type=int, help='New count (0 removes the requirement)')
    p.add_argument('--item', help='Only this item (id or name); default all items')

    add('stats', cmd_stats, 'Show player skills and survival stats')

    p = add('set-skill', cmd_set_skill, 'Set a skill level', writes=True)
    p.add_argument('skill', help='Skill name, e.g. Combat')
    p.add_argument('level', type=int)
    p.add_argument('--experience', type=float)

    p = add('set-stat', cmd_set_stat, 'Set a survival stat', writes=True)
    p.add_argument('stat', help='Stat name, e.g. health')
    p.add_argument('current', type=float)
    p.add_argument('--min', type=float)
    p.add_argument('--max', type=float)

    p = add('export', cmd_export, 'Export the document as JSON')
    p.add_argument('-o', '--output', help='Output .json path (default: input name with .json)')
    p.add_argument('--compact', action='store_true', help='Write minified JSON as stored in the save')

    return ap


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s: %(message)s')
    # Size mismatch warnings are reported through logging
    logging.captureWarnings(True)
    try:
        return args.func(args) or 0
    except (sav_codec.SaveFileError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
