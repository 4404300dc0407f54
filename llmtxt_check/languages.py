"""
Language tag handling for fenced code blocks.

Normalizes fence info-string tags and frontmatter `language` values to a
canonical ecosystem name, and knows the comment syntax of each ecosystem so
the reference checker can strip comments before scanning identifiers.
"""

from typing import Dict, Optional, Tuple


class LanguageRegistry:
    """
    Canonical names for language tags.

    Supported languages:
    - Python (python, py, python3, pycon, ipython)
    - TypeScript (typescript, ts, tsx)
    - JavaScript (javascript, js, jsx, node)
    - Go (go, golang)
    - Rust (rust, rs)
    - Java, Kotlin, C#, C, C++, Ruby, Shell
    """

    # Language tag mappings (variations -> canonical name)
    LANGUAGE_MAPPINGS = {
        # Python
        'python': 'python',
        'py': 'python',
        'python3': 'python',
        'py3': 'python',
        'pycon': 'python',
        'ipython': 'python',

        # TypeScript
        'typescript': 'typescript',
        'ts': 'typescript',
        'tsx': 'typescript',

        # JavaScript
        'javascript': 'javascript',
        'js': 'javascript',
        'jsx': 'javascript',
        'node': 'javascript',

        # Go
        'go': 'go',
        'golang': 'go',

        # Rust
        'rust': 'rust',
        'rs': 'rust',

        # JVM / .NET / C family
        'java': 'java',
        'kotlin': 'kotlin',
        'kt': 'kotlin',
        'csharp': 'csharp',
        'cs': 'csharp',
        'c#': 'csharp',
        'c': 'c',
        'cpp': 'cpp',
        'c++': 'cpp',

        # Scripting
        'ruby': 'ruby',
        'rb': 'ruby',
        'bash': 'bash',
        'sh': 'bash',
        'shell': 'bash',
        'console': 'bash',
    }

    # Comment syntax per canonical language: (line comment, block open, block close)
    COMMENT_SYNTAX: Dict[str, Tuple[Optional[str], Optional[str], Optional[str]]] = {
        'python': ('#', None, None),
        'ruby': ('#', None, None),
        'bash': ('#', None, None),
        'typescript': ('//', '/*', '*/'),
        'javascript': ('//', '/*', '*/'),
        'go': ('//', '/*', '*/'),
        'rust': ('//', '/*', '*/'),
        'java': ('//', '/*', '*/'),
        'kotlin': ('//', '/*', '*/'),
        'csharp': ('//', '/*', '*/'),
        'c': ('//', '/*', '*/'),
        'cpp': ('//', '/*', '*/'),
    }

    @classmethod
    def canonical(cls, tag: Optional[str]) -> Optional[str]:
        """
        Map a tag or language name to its canonical form.

        Unknown tags are returned lowercased so that two identical unknown
        tags still compare equal. Empty tags map to None.
        """
        if not tag:
            return None
        normalized = tag.strip().lower()
        if not normalized:
            return None
        return cls.LANGUAGE_MAPPINGS.get(normalized, normalized)

    @classmethod
    def comment_syntax(cls, language: Optional[str]) -> Tuple[Optional[str], Optional[str], Optional[str]]:
        canonical = cls.canonical(language)
        return cls.COMMENT_SYNTAX.get(canonical, ('#', None, None))


def canonical_language(tag: Optional[str]) -> Optional[str]:
    """Convenience wrapper around LanguageRegistry.canonical."""
    return LanguageRegistry.canonical(tag)
