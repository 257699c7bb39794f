"""
Flask web application for Bracket Manager.
"""
import os
import uuid
import yaml
from filelock import FileLock
from flask import Flask, request, jsonify, abort
from brackets.errors import BracketError, UnknownMatchError
from brackets.elimination import get_round_names
from brackets.queries import bye_count
from brackets.results import MatchResult
from brackets.seeding import SEED_TYPES
from brackets.tournament import Tournament

app = Flask(__name__)

BASE_DIR = os.path.dirname(os.path.dirname(__file__))
DATA_DIR = os.environ.get('BRACKET_DATA_DIR', os.path.join(BASE_DIR, 'data'))

app.secret_key = os.environ.get('SECRET_KEY') or os.urandom(24)

TOURNAMENTS_FILE = os.path.join(DATA_DIR, 'tournaments.yaml')
TOURNAMENTS_DIR = os.path.join(DATA_DIR, 'tournaments')
MAX_UPLOAD_SIZE = 5 * 1024 * 1024  # 5 MB


def _data_lock() -> FileLock:
    """Lock serializing writes under DATA_DIR."""
    os.makedirs(DATA_DIR, exist_ok=True)
    return FileLock(os.path.join(DATA_DIR, '.lock'), timeout=10)


def _tournament_file(tournament_id: str) -> str:
    """Return path to the YAML document of a saved tournament."""
    if not tournament_id or not tournament_id.isalnum():
        abort(404)
    return os.path.join(TOURNAMENTS_DIR, f'{tournament_id}.yaml')


def load_tournaments() -> list:
    """Load the registry of saved tournaments."""
    if not os.path.exists(TOURNAMENTS_FILE):
        return []
    try:
        with open(TOURNAMENTS_FILE, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        return data.get('tournaments', []) if data else []
    except Exception as e:
        app.logger.warning(f'Failed to parse {TOURNAMENTS_FILE}: {e}')
        return []


def save_tournaments(tournaments: list):
    """Save the registry of saved tournaments."""
    os.makedirs(DATA_DIR, exist_ok=True)
    with open(TOURNAMENTS_FILE, 'w', encoding='utf-8') as f:
        yaml.dump({'tournaments': tournaments}, f, default_flow_style=False)


def load_tournament(tournament_id: str):
    """Load a saved tournament, or None if it does not exist."""
    path = _tournament_file(tournament_id)
    if not os.path.exists(path):
        return None
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
        if not isinstance(data, dict):
            return None
        return Tournament.from_dict(data)
    except Exception as e:
        app.logger.warning(f'Failed to load tournament {tournament_id}: {e}')
        return None


def save_tournament(tournament_id: str, tournament: Tournament):
    """Write a tournament document and refresh its registry entry."""
    os.makedirs(TOURNAMENTS_DIR, exist_ok=True)
    with _data_lock():
        with open(_tournament_file(tournament_id), 'w', encoding='utf-8') as f:
            yaml.dump(tournament.to_dict(), f, default_flow_style=False)

        tournaments = [t for t in load_tournaments() if t.get('id') != tournament_id]
        tournaments.append({
            'id': tournament_id,
            'name': tournament.name,
            'date': tournament.created,
            'participantCount': tournament.participant_count,
            'champion': tournament.champion(),
        })
        save_tournaments(tournaments)


def _get_tournament_or_404(tournament_id: str) -> Tournament:
    tournament = load_tournament(tournament_id)
    if tournament is None:
        abort(404)
    return tournament


def _bracket_response(tournament_id: str, tournament: Tournament):
    bracket = tournament.bracket
    return jsonify({
        'success': True,
        'tournamentId': tournament_id,
        'bracketData': bracket.to_list() if bracket else None,
        'roundNames': get_round_names(bracket) if bracket else [],
        'champion': tournament.champion(),
    })


@app.errorhandler(404)
def not_found(e):
    return jsonify({'success': False, 'error': 'Not found'}), 404


@app.route('/api/tournaments/generate', methods=['POST'])
def api_generate_tournament():
    """Draw a new bracket from a participant list and save it."""
    data = request.get_json(silent=True) or {}
    participants = data.get('participants')
    seed_type = data.get('seedType', 'random')

    if not isinstance(participants, list):
        return jsonify({'success': False, 'error': 'participants must be a list of names.'}), 400
    if seed_type not in SEED_TYPES:
        return jsonify({'success': False, 'error': f'seedType must be one of {", ".join(SEED_TYPES)}.'}), 400

    tournament = Tournament(name=data.get('name') or 'Tournament Draw Sheet', seed_type=seed_type)
    if data.get('roundsPerMatch'):
        try:
            tournament.set_rounds_per_match(int(data['roundsPerMatch']))
        except (TypeError, ValueError, BracketError) as e:
            return jsonify({'success': False, 'error': str(e)}), 400

    try:
        tournament.generate(participants, seed_type)
    except BracketError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    app.logger.info(f'Generating bracket for {len(participants)} participants with seedType: {seed_type}')
    app.logger.debug(f'First round byes: {bye_count(tournament.bracket)}')

    tournament_id = uuid.uuid4().hex[:12]
    save_tournament(tournament_id, tournament)
    return _bracket_response(tournament_id, tournament)


@app.route('/api/tournaments/upload', methods=['POST'])
def api_upload_participants():
    """Read participants from an uploaded text file, one name per line."""
    uploaded = request.files.get('file')
    if uploaded is None or not uploaded.filename:
        return jsonify({'success': False, 'error': 'No file uploaded'}), 400

    content = uploaded.read(MAX_UPLOAD_SIZE + 1)
    if len(content) > MAX_UPLOAD_SIZE:
        return jsonify({'success': False, 'error': 'File too large (max 5 MB).'}), 400

    try:
        text = content.decode('utf-8-sig')
    except UnicodeDecodeError:
        return jsonify({'success': False, 'error': 'File must be UTF-8 text.'}), 400

    participants = [line.strip() for line in text.splitlines() if line.strip()]
    return jsonify({'success': True, 'participants': participants})


@app.route('/api/tournaments', methods=['GET'])
def api_list_tournaments():
    """List saved tournaments, most recent first."""
    tournaments = sorted(load_tournaments(), key=lambda t: t.get('date', ''), reverse=True)
    return jsonify({'success': True, 'tournaments': tournaments})


@app.route('/api/tournaments/<tournament_id>', methods=['GET'])
def api_get_tournament(tournament_id):
    tournament = _get_tournament_or_404(tournament_id)
    data = tournament.to_dict()
    data['id'] = tournament_id
    data['roundNames'] = get_round_names(tournament.bracket) if tournament.bracket else []
    return jsonify({'success': True, 'tournament': data})


@app.route('/api/tournaments/<tournament_id>', methods=['DELETE'])
def api_delete_tournament(tournament_id):
    path = _tournament_file(tournament_id)
    with _data_lock():
        if os.path.exists(path):
            os.remove(path)
        tournaments = load_tournaments()
        remaining = [t for t in tournaments if t.get('id') != tournament_id]
        if len(remaining) == len(tournaments):
            abort(404)
        save_tournaments(remaining)
    return jsonify({'success': True})


@app.route('/api/tournaments/<tournament_id>/winner', methods=['POST'])
def api_record_winner(tournament_id):
    """Record a match winner; unknown match ids leave the bracket untouched."""
    data = request.get_json(silent=True) or {}
    match_id = data.get('matchId', '')
    winner = (data.get('winner') or '').strip()
    if not match_id or not winner:
        return jsonify({'success': False, 'error': 'matchId and winner are required.'}), 400

    tournament = _get_tournament_or_404(tournament_id)
    tournament.record_winner(match_id, winner)
    save_tournament(tournament_id, tournament)
    return _bracket_response(tournament_id, tournament)


@app.route('/api/tournaments/<tournament_id>/results', methods=['POST'])
def api_save_match_result(tournament_id):
    """Save a scored match result, advancing the winner when completed."""
    data = request.get_json(silent=True) or {}
    tournament = _get_tournament_or_404(tournament_id)

    try:
        result = MatchResult.from_dict(data)
        tournament.save_match_result(result)
    except UnknownMatchError as e:
        return jsonify({'success': False, 'error': str(e)}), 404
    except (BracketError, TypeError) as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    save_tournament(tournament_id, tournament)
    return _bracket_response(tournament_id, tournament)


@app.route('/api/tournaments/<tournament_id>/results/<match_id>/winner', methods=['POST'])
def api_update_match_winner(tournament_id, match_id):
    """Override the winner of a scored match with a reason."""
    data = request.get_json(silent=True) or {}
    new_winner = (data.get('winner') or '').strip()
    if not new_winner:
        return jsonify({'success': False, 'error': 'winner is required.'}), 400

    tournament = _get_tournament_or_404(tournament_id)
    try:
        tournament.update_match_winner(match_id, new_winner, data.get('reason'))
    except UnknownMatchError as e:
        return jsonify({'success': False, 'error': str(e)}), 404

    save_tournament(tournament_id, tournament)
    return _bracket_response(tournament_id, tournament)


@app.route('/api/tournaments/<tournament_id>/participants', methods=['POST'])
def api_edit_participants(tournament_id):
    """Add, rename or delete a participant."""
    data = request.get_json(silent=True) or {}
    action = data.get('action', '')
    name = (data.get('name') or '').strip()

    tournament = _get_tournament_or_404(tournament_id)
    if action == 'add':
        success, message = tournament.add_participant(name)
    elif action == 'rename':
        success, message = tournament.rename_participant(name, data.get('newName', ''))
    elif action == 'delete':
        success, message = tournament.remove_participant(name)
    else:
        return jsonify({'success': False, 'error': f'Unknown action: {action}'}), 400

    if not success:
        return jsonify({'success': False, 'error': message}), 400

    save_tournament(tournament_id, tournament)
    app.logger.info(f'Tournament {tournament_id}: {message}')
    return jsonify({
        'success': True,
        'message': message,
        'bracketData': tournament.bracket.to_list(),
        'participantCount': tournament.participant_count,
    })


@app.route('/api/tournaments/<tournament_id>/status', methods=['GET'])
def api_tournament_status(tournament_id):
    tournament = _get_tournament_or_404(tournament_id)
    matches_started, rounds_started = tournament.round_status()
    can_modify, reason = tournament.can_modify_participants()
    return jsonify({
        'success': True,
        'anyMatchesStarted': matches_started,
        'anyRoundsStarted': rounds_started,
        'canModifyParticipants': can_modify,
        'reason': reason,
        'champion': tournament.champion(),
    })


if __name__ == '__main__':
    app.run(debug=os.environ.get('FLASK_DEBUG') == '1')
