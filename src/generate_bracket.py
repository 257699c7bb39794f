import argparse
import json
import os
import random
import sys
import yaml
from brackets.elimination import create_bracket, get_round_names
from brackets.errors import BracketError
from brackets.queries import bye_count
from brackets.seeding import SEED_TYPES
from brackets.tournament import validate_participants


def load_participants(file_path):
    """Read participants from a YAML list, or a text file with one name per line."""
    with open(file_path, mode='r', encoding='utf-8') as file:
        content = file.read()
    if file_path.endswith(('.yaml', '.yml')):
        data = yaml.safe_load(content) or []
        if isinstance(data, dict):
            data = data.get('participants', [])
        return [str(name) for name in data]
    return [line.strip() for line in content.splitlines() if line.strip()]


def format_bracket(bracket):
    lines = []
    for round_name, round_matches in zip(get_round_names(bracket), bracket):
        if lines:
            lines.append("")
        lines.append(f"# {round_name}")
        for match in round_matches:
            first, second = (p or "TBD" for p in match.participants)
            line = f"{match.id}: {first} vs {second}"
            if match.winner:
                line += f" -> {match.winner}"
            lines.append(line)
    return "\n".join(lines)


def main(argv=None):
    script_dir = os.path.dirname(__file__)
    base_dir = os.path.dirname(script_dir)

    parser = argparse.ArgumentParser(description='Draw a single elimination bracket.')
    parser.add_argument('participants_file', nargs='?',
                        default=os.path.join(base_dir, 'data', 'participants.txt'))
    parser.add_argument('--seed-type', choices=SEED_TYPES, default='as-entered')
    parser.add_argument('--seed', type=int, help='Random seed for --seed-type random')
    parser.add_argument('--json', action='store_true', help='Print the bracket as JSON')
    args = parser.parse_args(argv)

    try:
        participants = validate_participants(load_participants(args.participants_file))
    except FileNotFoundError:
        print(f"Error: {args.participants_file} not found", file=sys.stderr)
        return 1
    except BracketError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    bracket = create_bracket(participants, args.seed_type, random.Random(args.seed))

    if args.json:
        print(json.dumps(bracket.to_list(), indent=2))
    else:
        print(f"{len(participants)} participants, {bracket.bracket_size} slots, {bye_count(bracket)} byes\n")
        print(format_bracket(bracket))
    return 0


if __name__ == '__main__':
    sys.exit(main())
