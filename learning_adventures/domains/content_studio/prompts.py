# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Prompt construction and response parsing for generated HTML games."""

import re
from dataclasses import dataclass, field

GAME_TYPES = ("HTML_2D", "HTML_3D", "INTERACTIVE", "QUIZ", "SIMULATION", "PUZZLE")
CATEGORIES = ("math", "science", "english", "history", "interdisciplinary")
DIFFICULTIES = ("easy", "medium", "hard")

_TITLE_PATTERN = re.compile(r"<title>(.*?)</title>", re.IGNORECASE)
_CHANGES_PATTERN = re.compile(r"<!--\s*Changes:\s*(.*?)\s*-->", re.IGNORECASE | re.DOTALL)

DEFAULT_CHANGES_SUMMARY = "Code updated based on feedback"


@dataclass
class GameRequest:
    """What the admin asked for."""

    prompt: str
    category: str
    game_type: str
    grade_level: list[str] = field(default_factory=list)
    difficulty: str = "medium"
    skills: list[str] = field(default_factory=list)
    context: str | None = None

    @property
    def is_3d(self) -> bool:
        return self.game_type == "HTML_3D"


def build_game_prompt(request: GameRequest) -> str:
    """Full generation prompt: the admin's idea plus platform requirements."""
    dimension = "3D" if request.is_3d else "2D"
    rendering = (
        "Use Three.js CDN for 3D graphics with physics simulation"
        if request.is_3d
        else "Use Canvas API or DOM manipulation"
    )
    context = f"\nAdditional Context: {request.context}\n" if request.context else ""

    return f"""
Create an educational {dimension} game for children that:
{request.prompt}

REQUIREMENTS:

1. Educational Standards:
   - Subject: {request.category}
   - Grade Level: {", ".join(request.grade_level)}
   - Difficulty: {request.difficulty}
   - Learning Objectives: {", ".join(request.skills)}
   - 70% engagement, 30% obvious learning

2. Technical Specifications:
   - Single HTML file with embedded CSS and JavaScript
   - {rendering}
   - 60 FPS performance target
   - Mobile-responsive design (works on tablets)
   - File size under 3MB
   - No external dependencies except Three.js CDN if needed

3. Educational Integration:
   - Learning objectives shown when the game starts
   - Immediate visual and text feedback on answers
   - Score, level and completion percentage visible
   - Hints for struggling students
   - Celebratory animations on success
   - Count correct and incorrect answers

4. Accessibility (WCAG 2.1 AA):
   - Semantic HTML structure
   - ARIA labels for interactive elements
   - Keyboard navigation (arrow keys, enter, space)
   - Color contrast of at least 4.5:1
   - Alt text for all images
   - Visible focus indicators
   - Screen reader compatible

5. Design:
   - Child-friendly, colorful interface
   - Touch targets of at least 44x44px
   - Fonts of 16px or larger
   - Age-appropriate visuals with a consistent color scheme

6. Code Structure:
   - Commented code with error handling
   - Explicit game state
   - Progress saved to localStorage
   - Restart/reset button
{context}
OUTPUT FORMAT:
Return ONLY the complete HTML file code, ready to save and run.
Include proper <!DOCTYPE html>, <html>, <head>, and <body> tags.
Start your response with: <!DOCTYPE html>
"""


def build_iteration_prompt(code: str, feedback: str) -> str:
    """Revision prompt asking for a ``<!-- Changes: ... -->`` header comment."""
    return f"""
You are iterating on an educational game. Here's the current code:

```html
{code}
```

User feedback for improvements: {feedback}

Please modify the code to address the feedback while:
1. Maintaining all existing functionality
2. Preserving educational value
3. Keeping accessibility features (ARIA labels, keyboard nav, etc.)
4. Following the same coding standards
5. Keeping the game a standalone single HTML file

IMPORTANT: At the very top of the HTML file, add a comment summarizing the changes made:
<!-- Changes: [brief summary of what was modified] -->

Return ONLY the complete updated HTML file code.
Start your response with: <!DOCTYPE html>
"""


def extract_title(code: str) -> str | None:
    match = _TITLE_PATTERN.search(code)
    return match.group(1) if match else None


def title_from_prompt(prompt: str) -> str:
    """First six words of the prompt, capitalised.

    Example:
        >>> title_from_prompt("a space race where kids add fractions to refuel")
        'A space race where kids add'
    """
    words = " ".join(prompt.split(" ")[:6])
    return words[:1].upper() + words[1:]


def extract_changes_summary(code: str) -> str | None:
    match = _CHANGES_PATTERN.search(code)
    return match.group(1).strip() if match else None


def content_type_for(game_type: str) -> str:
    """Catalog type: 3D and simulations are games, everything else lessons."""
    return "game" if "3D" in game_type or "SIMULATION" in game_type else "lesson"
