"""Prompt for adjudicating Zoom participant names against mentee names.

The prompt carries the whole matching policy: component overlap
threshold, suffixes to ignore, Indonesian abbreviation equivalences,
worked positive/negative examples and the confidence rubric. The model
answers with one JSON object in the Adjudication shape.
"""

import json

ADJUDICATION_PROMPT = """You are an expert at matching Indonesian names. Given a Zoom participant name and candidate mentee names, select the best match.

Zoom name: "{zoom_name}"
Candidates: {candidates}

STRICT MATCHING RULES:
1. Names must have substantial overlap, not just common words like "Dwi", "Muhammad", "Putri"
2. At least 60% of the meaningful name components must match or be variations
3. Consider the full name structure, not just individual words
4. Ignore program suffixes: "_Web", "_AI", "Web Development", and parenthetical nicknames such as "(nickname)"
5. Handle Indonesian name variations: "Muhammad/Muh./M/Mhd", "Dwi/Dwy", "Bella/Bela"
6. Consider name order variations and nicknames

POSITIVE EXAMPLES (good matches):
- "Klaudio_AI" -> "Klaudio P.H" (same first name + initial)
- "adinafadillah" -> "Adina Fadillah Balqis" (first + middle name match)
- "bella_Web Dev" -> "Bela Putri Carolian" (nickname variation)
- "FAUZAN DWI NUGROHO_Web" -> "Fauzan Dwi Nugroho" (exact match)

NEGATIVE EXAMPLES (bad matches to avoid):
- "Indri Dwi Lestari" -> "Muhammad Trio Novrian" (only "Dwi" common)
- "Indri Dwi Lestari" -> "Fauzan Dwi Nugroho" (only "Dwi" common)
- "Alya Massardi" -> "Alyion Nita" (only the "Aly" prefix common)
- "Vebri Pratama" -> "Agnes Monika" (completely different)
- "Deny Wahyu" -> "Vanessa" (no meaningful overlap)

Never match on a single common word such as "Muhammad", "Putri", "Dwi" or "Ahmad".
Require at least 2 meaningful name components to correspond when both names have them.

CONFIDENCE SCORING:
- 0.9-1.0: Exact or very close match (same person, different format)
- 0.7-0.8: Strong match with clear name variations
- 0.5-0.6: Possible match but uncertain
- 0.0-0.4: Poor match, likely different people

BEFORE deciding on a match, check:
1. Do the first names actually match (not just look similar)?
2. Do at least 2 name components correspond?
3. Is this likely the same person with different formatting?
If any answer is "no" or "uncertain", set bestMatch to null.

If confidence <= 0.6 OR only common words match, set bestMatch to null.

Return a single JSON object:
{{"zoomName": "{zoom_name}", "bestMatch": "<exact candidate string or null>", "confidence": <0.0-1.0>, "reason": "<short explanation>", "matchType": "exact|nickname|spelling|order-variant|token-trim|ai-inferred"}}

zoomName must be copied exactly. bestMatch must be copied character for character from Candidates, or null."""


def build_adjudication_prompt(zoom_name: str, candidates: list[str]) -> str:
    """Fill the adjudication prompt for one name and its candidates."""
    return ADJUDICATION_PROMPT.format(
        zoom_name=zoom_name,
        candidates=json.dumps(candidates, ensure_ascii=False),
    )
