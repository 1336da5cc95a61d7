"""All prompt templates for Gemini API calls."""

from models.schemas.dialect_profile import DialectProfile


def build_dialect_prompt(transcription: str) -> str:
    """Dialect call: accent family vs. Patois/Creole usage."""
    return f"""You are a Caribbean linguistics expert. Analyze this voice transcription for dialect and accent markers.

Distinguish between ACCENT (pronunciation, rhythm, intonation) and PATOIS/CREOLE (actual vocabulary and grammar).
Someone can have a Caribbean ACCENT but speak Standard English with no Patois. Only mark patois as present if
Caribbean vocabulary or grammar is actually used.

CARIBBEAN DIALECTS TO IDENTIFY:
- JAMAICAN PATOIS: "mi" (me/I), "dem" (them), "yuh" (you), "seh" (say), "weh" (where), "waan" (want),
  "mek" (make), "fi" (for/to), "inna" (in), "promo" (someone), "badda" (bother), "yaad" (yard/home)
- TRINIDADIAN: "ah go" (I will), "rel" (really), "gyul" (girl), "lime" (hang out), "fete" (party),
  "mamaguy" (fool around), "tabanca" (heartbreak)
- BARBADIAN (BAJAN): "wunna" (you all), "pun" (on), "wid" (with), "de" (the), "gine" (going to),
  "bout here" (around here)
- GUYANESE: "me gun" (I will), "small boy/girl" (young person), "backra" (white person), "me deh" (I am)

ANALYZE FOR:
- Vocabulary markers and grammar patterns
- Phonetic spellings and code-switching between English and Creole
- Cultural references (places, customs, slang)

TRANSCRIPTION:
---
{transcription}
---

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "accent": "jamaican" | "trinidadian" | "barbadian" | "guyanese" | "general_caribbean" | "standard_english",
  "confidence": <float 0.0-1.0>,
  "patois_level": "none" | "light" | "moderate" | "heavy",
  "indicators": ["specific words/phrases found"],
  "linguistic_features": ["grammar patterns", "phonetic features"],
  "cultural_references": ["cultural terms", "local expressions"],
  "dialect_variant": "<more specific variant if detectable, else null>",
  "speech_patterns": ["rhythm or intonation clues"],
  "island_probability": {{"jamaica": <float>, "trinidad": <float>, "barbados": <float>, "guyana": <float>, "other": <float>}},
  "recommendation": "<one sentence about the dialect usage>"
}}"""


def build_extraction_prompt(transcription: str, dialect: DialectProfile | None = None) -> str:
    """Extraction call: job type and gig fields from a (normalized) transcription."""
    dialect_section = ""
    if dialect is not None and dialect.is_caribbean:
        dialect_section = f"""
DIALECT PRE-ANALYSIS (use when interpreting Creole vocabulary):
- Dialect: {dialect.primary_dialect} ({dialect.confidence:.0%} confidence)
- Patois level: {dialect.patois_level}
- Markers found: {', '.join(dialect.detected_terms) or 'none'}
---
"""

    return f"""You extract structured gig listings from Caribbean voice notes.

Decide whether the speaker is HIRING someone (job_posting) or LOOKING FOR WORK (work_request).
"promo" in Jamaican speech means "someone" (e.g. "mi need a promo fi fix di sink" is a job posting).
If you cannot tell, use "unclear". Never invent fields that are not in the transcription; use null instead.
{dialect_section}
TRANSCRIPTION:
---
{transcription}
---

Respond with ONLY valid JSON (no markdown, no code fences) in this exact structure:
{{
  "job_type": "job_posting" | "work_request" | "unclear",
  "skills": ["short skill names, e.g. plumbing, cooking, electrician"],
  "location": "<town or district named by the speaker, else null>",
  "budget": {{"amount": <number or null>, "currency": "<ISO code or null>", "type": "fixed" | "hourly" | "negotiable" | null}},
  "urgency": "low" | "medium" | "high" | null,
  "experience": "beginner" | "intermediate" | "expert" | "unclear" | null,
  "timing": "<when the work is needed, else null>"
}}"""
