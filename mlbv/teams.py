from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Team:
    id: int
    code: str
    name: str
    league: str
    division: str


TEAMS: tuple[Team, ...] = (
    Team(108, "LAA", "Los Angeles Angels", "AL", "West"),
    Team(109, "ARI", "Arizona Diamondbacks", "NL", "West"),
    Team(110, "BAL", "Baltimore Orioles", "AL", "East"),
    Team(111, "BOS", "Boston Red Sox", "AL", "East"),
    Team(112, "CHC", "Chicago Cubs", "NL", "Central"),
    Team(113, "CIN", "Cincinnati Reds", "NL", "Central"),
    Team(114, "CLE", "Cleveland Guardians", "AL", "Central"),
    Team(115, "COL", "Colorado Rockies", "NL", "West"),
    Team(116, "DET", "Detroit Tigers", "AL", "Central"),
    Team(117, "HOU", "Houston Astros", "AL", "West"),
    Team(118, "KCR", "Kansas City Royals", "AL", "Central"),
    Team(119, "LAD", "Los Angeles Dodgers", "NL", "West"),
    Team(120, "WSH", "Washington Nationals", "NL", "East"),
    Team(121, "NYM", "New York Mets", "NL", "East"),
    Team(133, "ATH", "Athletics", "AL", "West"),
    Team(134, "PIT", "Pittsburgh Pirates", "NL", "Central"),
    Team(135, "SDP", "San Diego Padres", "NL", "West"),
    Team(136, "SEA", "Seattle Mariners", "AL", "West"),
    Team(137, "SFG", "San Francisco Giants", "NL", "West"),
    Team(138, "STL", "St. Louis Cardinals", "NL", "Central"),
    Team(139, "TBR", "Tampa Bay Rays", "AL", "East"),
    Team(140, "TEX", "Texas Rangers", "AL", "West"),
    Team(141, "TOR", "Toronto Blue Jays", "AL", "East"),
    Team(142, "MIN", "Minnesota Twins", "AL", "Central"),
    Team(143, "PHI", "Philadelphia Phillies", "NL", "East"),
    Team(144, "ATL", "Atlanta Braves", "NL", "East"),
    Team(145, "CWS", "Chicago White Sox", "AL", "Central"),
    Team(146, "MIA", "Miami Marlins", "NL", "East"),
    Team(147, "NYY", "New York Yankees", "AL", "East"),
    Team(158, "MIL", "Milwaukee Brewers", "NL", "Central"),
)

RETIRED_CODES = {"OAK": "ATH"}


def find_by_code(code: str) -> Team:
    c = code.strip().upper()
    if c in RETIRED_CODES:
        raise ValueError(f"The {c} code has been retired and replaced with {RETIRED_CODES[c]}")
    for t in TEAMS:
        if t.code == c:
            return t
    raise ValueError(f"Invalid team code: {code}")


def find_by_name(name: str) -> Team | None:
    low = name.strip().lower()
    for t in TEAMS:
        if t.name.lower() == low:
            return t
    return None


def find_by_id(team_id: int) -> Team | None:
    for t in TEAMS:
        if t.id == team_id:
            return t
    return None


def resolve_team(team: str) -> Team:
    # Accept TOR, "Blue Jays", "Toronto Blue Jays", or numeric id
    t = team.strip()
    if t.isdigit():
        found = find_by_id(int(t))
        if found:
            return found
        raise ValueError(f"Unknown team id: {team}")
    if len(t) == 3 and t.isalpha():
        return find_by_code(t)
    found = find_by_name(t)
    if found:
        return found
    # substring match as a last resort
    low = t.lower()
    matches = [x for x in TEAMS if low in x.name.lower()]
    if len(matches) == 1:
        return matches[0]
    raise ValueError(f"Could not resolve team: {team}")
