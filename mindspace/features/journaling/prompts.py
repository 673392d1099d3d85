"""
Prompt templates for journal enrichment.

Two modes:
- entry insight: a short reflection plus three suggestions for one check-in
- weekly digest: themes and an action plan over up to seven check-ins
"""

from typing import Sequence

from mindspace.features.journaling.models import JournalEntry, Mood

MAX_DIGEST_ENTRIES = 7


def build_entry_prompt(mood: Mood, gratitude: str, intentions: str, thoughts: str) -> str:
    """Prompt for a reflective response to a single entry."""
    return f"""You are a compassionate mental wellness companion. A user has shared a journal entry with you.

Mood: {mood.label} ({mood.score}/5)
Gratitude: "{gratitude}"
Intentions: "{intentions}"
Thoughts: "{thoughts}"

Please provide a warm, empathetic response that:
1. Acknowledges their feelings and validates their experience
2. References specific words or phrases they used to show you're truly listening
3. Offers 3 specific, actionable suggestions they can try within the next 24-48 hours
4. Matches the severity of your response to their actual situation (don't catastrophize minor concerns)
5. Maintains a conversational, supportive tone (like talking to a caring friend)

Format your response as:

💭 **Reflection**
[2-3 sentences acknowledging their feelings and referencing their specific words]

✨ **Suggestions**
1. [Specific, achievable action]
2. [Specific, achievable action]
3. [Specific, achievable action]

Keep the tone warm and encouraging. Be specific and practical."""


def _digest_block(index: int, entry: JournalEntry) -> str:
    lines = [f"Day {index} ({entry.date.date().isoformat()}): Mood - {entry.mood.label}"]
    if entry.gratitude:
        lines.append(f"Grateful for: {entry.gratitude}")
    if entry.intentions:
        lines.append(f"Intentions: {entry.intentions}")
    if entry.thoughts:
        lines.append(entry.thoughts)
    return "\n".join(lines)


def build_digest_prompt(entries: Sequence[JournalEntry]) -> str:
    """Prompt for the weekly reflection. Entries are used in the order given."""
    if entries:
        summary = "\n\n---\n\n".join(
            _digest_block(index, entry) for index, entry in enumerate(entries, start=1)
        )
    else:
        summary = "(No journal entries were recorded this week.)"

    return f"""You are a compassionate mental wellness companion reviewing a user's week of journal entries.

Here are their entries from the past week:

{summary}

Please provide a thoughtful weekly reflection that:
1. Identifies 2-3 key themes or patterns you noticed
2. Celebrates positive moments and growth
3. Acknowledges challenges with empathy
4. Provides an actionable "Action Plan" with 3 specific suggestions for the coming week

Format your response as:

🌟 **Weekly Reflection**
[2-3 paragraphs discussing themes, patterns, and observations]

📋 **Action Plan for Next Week**
1. [Specific, achievable goal]
2. [Specific, achievable goal]
3. [Specific, achievable goal]

Keep the tone warm, encouraging, and forward-looking."""
