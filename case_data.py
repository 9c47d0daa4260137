"""
case_data.py
============
Authored catalog of ready-to-play noir cases.

Each entry uses the compact catalog shape (flat victim / suspect lists, plain
evidence names) rather than the full CaseScript shape, so new cases are quick
to write. CatalogCaseRepository converts entries with
``case_repository.convert_catalog_entry()``.

Catalog entry keys:
    id, title, location, time_of_death, cause_of_death
    introduction   : Opening atmosphere, read to the player as the first line.
    description    : What the main location looks like.
    victim         : {name, age, occupation, background}
    evidence       : Ordered evidence names found at the scene.
    red_herrings   : Subset of ``evidence`` that is deliberately misleading.
    key_evidence   : Optional subset of ``evidence`` that proves the solution.
                     Defaults to the first three non-red-herring items.
    killer, murder_weapon, motive, solution (how the killer had opportunity)
    suspects       : [{name, occupation, alibi, motive}]; ``killer`` must be
                     one of the names.

To add a case, append a dict with the same shape. A JSON file holding
``{"mysteries": [...]}`` in this shape can replace the built-in catalog
(see MYSTERY_CATALOG_PATH in config.py).
"""

from __future__ import annotations

from typing import Dict, List


MYSTERIES: List[Dict] = [

    # ------------------------------------------------------------------
    # 1. Blackwood Mansion
    # ------------------------------------------------------------------
    {
        "id": "blackwood_mansion",
        "title": "The Blackwood Library",
        "location": "Blackwood Mansion, up on Hillcrest Drive",
        "time_of_death": "11:15 PM",
        "cause_of_death": "Blunt force trauma to the head",
        "introduction": (
            "Rain hammers the gables of Blackwood Mansion like it has a grudge. "
            "Victor Hale, the family's money man, lies cold on the library rug, "
            "the fire burned down to embers beside him. The household is awake, "
            "dressed, and saying nothing. The uniformed boys have kept the door shut "
            "for you."
        ),
        "description": (
            "A two-storey library with a fireplace, a rolling ladder, a reading desk, "
            "and a side door to the servants' stair."
        ),
        "victim": {
            "name": "Victor Hale",
            "age": 58,
            "occupation": "Estate executor",
            "background": "Managed the Blackwood fortune and was about to rewrite the will.",
        },
        "evidence": [
            "Soot-smeared fireplace tongs",
            "Draft of an amended will",
            "Lady's reading glasses on the desk",
            "Muddy boot prints by the side door",
            "Half-finished glass of brandy",
        ],
        "red_herrings": [
            "Muddy boot prints by the side door",
            "Half-finished glass of brandy",
        ],
        "killer": "Lydia Blackwood",
        "murder_weapon": "a brass candlestick, later hidden in the fireplace",
        "motive": "Victor's amended will would have cut her out of the inheritance",
        "solution": (
            "She slipped down from her bedroom by the servants' stair at eleven and "
            "argued with Victor over the new will before striking him."
        ),
        "suspects": [
            {
                "name": "Lydia Blackwood",
                "occupation": "Heiress",
                "alibi": "Says she was in her bedroom reading a novel all evening.",
                "motive": "Stood to lose her inheritance under the new will.",
            },
            {
                "name": "Dr. Marcus Vale",
                "occupation": "Family physician",
                "alibi": "Claims he left the mansion at 10:45 PM after a routine visit.",
                "motive": "Owed Victor a great deal of money.",
            },
            {
                "name": "Eleanor Wright",
                "occupation": "Housekeeper",
                "alibi": "Says she was in the basement doing laundry.",
                "motive": "Victor had threatened to dismiss her.",
            },
            {
                "name": "Thomas Reed",
                "occupation": "Chauffeur",
                "alibi": "Says he was polishing the Packard in the garage.",
                "motive": "Victor caught him selling the family's wine.",
            },
        ],
    },

    # ------------------------------------------------------------------
    # 2. The Blue Lantern
    # ------------------------------------------------------------------
    {
        "id": "blue_lantern",
        "title": "Last Call at the Blue Lantern",
        "location": "The Blue Lantern supper club, Harbor Street",
        "time_of_death": "1:40 AM",
        "cause_of_death": "Cyanide poisoning",
        "introduction": (
            "The neon sign outside the Blue Lantern buzzes blue over wet pavement. "
            "Inside, the chairs are up on the tables and the band has packed its "
            "horns, but nobody has gone home. Sal Moretti, who owned the place and "
            "half the waterfront, is slumped in his private booth with his last drink "
            "still in his hand."
        ),
        "description": (
            "A smoky club with a long bar, a bandstand, a private booth at the back, "
            "and a cramped office behind the kitchen."
        ),
        "victim": {
            "name": "Sal Moretti",
            "age": 52,
            "occupation": "Nightclub owner",
            "background": "Ran the club as a front for waterfront loans.",
        },
        "evidence": [
            "Lipstick-marked cocktail glass",
            "Ledger with torn-out pages",
            "Bitter-almond smell on the drink",
            "Pawn ticket for a diamond ring",
            "Unsigned threatening note",
            "Matchbook from a rival club",
        ],
        "red_herrings": [
            "Unsigned threatening note",
            "Matchbook from a rival club",
        ],
        "key_evidence": [
            "Bitter-almond smell on the drink",
            "Ledger with torn-out pages",
            "Pawn ticket for a diamond ring",
        ],
        "killer": "Frankie Dunn",
        "murder_weapon": "cyanide slipped into Sal's nightcap at the bar",
        "motive": "Sal found out Frankie had been skimming the books and was going to have him killed",
        "solution": (
            "As bartender, Frankie mixed Sal's nightcap himself after last call, "
            "when only the staff were left."
        ),
        "suspects": [
            {
                "name": "Vera Lane",
                "occupation": "Torch singer",
                "alibi": "Says she was in her dressing room after her last set.",
                "motive": "Sal pawned the ring he gave her and refused to let her leave.",
            },
            {
                "name": "Frankie Dunn",
                "occupation": "Bartender",
                "alibi": "Says he was restocking the cellar when Sal collapsed.",
                "motive": "Knew what Sal did to people who stole from him.",
            },
            {
                "name": "Leo Castellano",
                "occupation": "Rival club owner",
                "alibi": "Claims he was across town at his own club all night.",
                "motive": "Wanted Sal's waterfront business.",
            },
            {
                "name": "Ruth Moretti",
                "occupation": "Sal's wife",
                "alibi": "Says she was at home waiting up for him.",
                "motive": "Knew about Vera.",
            },
        ],
    },

    # ------------------------------------------------------------------
    # 3. Pier 17
    # ------------------------------------------------------------------
    {
        "id": "pier_seventeen",
        "title": "Fog on Pier 17",
        "location": "Pier 17 freight office, the East River docks",
        "time_of_death": "5:20 AM",
        "cause_of_death": "Strangulation",
        "introduction": (
            "Fog rolls off the East River so thick the foghorns sound like they are "
            "in the room with you. Walt Kowalski, night foreman at Pier 17, was found "
            "at dawn behind the freight office desk. The shift whistle has blown, the "
            "cargo is not moving, and every stevedore on the pier is watching you "
            "walk in."
        ),
        "description": (
            "A cramped freight office with a desk, a safe, a wall of manifests, a "
            "coal stove, and a window facing the loading cranes."
        ),
        "victim": {
            "name": "Walt Kowalski",
            "age": 47,
            "occupation": "Dock foreman",
            "background": "Ran the night shift and decided who worked and who went hungry.",
        },
        "evidence": [
            "Length of cargo rope with frayed fibres",
            "Altered shipping manifest",
            "Open safe with cash still inside",
            "Union pin on the floor",
            "Cigarette butts in the stove",
        ],
        "red_herrings": [
            "Union pin on the floor",
            "Cigarette butts in the stove",
        ],
        "killer": "Irene Doyle",
        "murder_weapon": "a length of cargo rope from the loading bay",
        "motive": "Walt discovered she was falsifying manifests for a smuggling ring and tried to blackmail her",
        "solution": (
            "Irene came back to the office before dawn, claiming she had forgotten her "
            "gloves, when Walt was alone with the manifests."
        ),
        "suspects": [
            {
                "name": "Irene Doyle",
                "occupation": "Shipping clerk",
                "alibi": "Says she left at midnight and took the streetcar home.",
                "motive": "Walt had been asking questions about her paperwork.",
            },
            {
                "name": "Mickey Flynn",
                "occupation": "Union organiser",
                "alibi": "Claims he was at a union meeting until four.",
                "motive": "Walt broke the last strike.",
            },
            {
                "name": "Hank Sorensen",
                "occupation": "Crane operator",
                "alibi": "Says he was up in his crane cab the whole shift.",
                "motive": "Walt docked his pay for drinking on the job.",
            },
            {
                "name": "Father Dominic Russo",
                "occupation": "Waterfront priest",
                "alibi": "Says he was hearing confession at St. Veronica's.",
                "motive": None,
            },
        ],
    },
]
"""
Built-in cases, in play-order-independent sequence. Keep ids stable: they
are stored in sessions and in the case history.
"""
