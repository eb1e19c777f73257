"""
Canned completions for mock mode.

Keys map to the response_key argument of GeminiClient.generate() /
GroqClient.generate(). Some are deliberately "chatty" (prose, code fences)
so the extractor's fallback tiers run in local dev too.
"""

MOCK_RESPONSES: dict[str, str] = {
    "default": (
        "[MOCK] This is a placeholder AI response. "
        "Set AI_MOCK_MODE=false and provide GEMINI_API_KEY / GROQ_API_KEY for real responses."
    ),
    "verse_analysis": (
        '{"themes": ["God\'s love", "Salvation", "Eternal life"], '
        '"relatedVerses": ["Romans 5:8", "1 John 4:9", "Ephesians 2:8"], '
        '"significance": "[MOCK] A summary of the gospel: divine love expressed in the gift of the Son.", '
        '"context": "[MOCK] Spoken to Nicodemus, a Pharisee who came to Jesus by night."}'
    ),
    "related_verses": (
        "Here are some related verses:\n"
        "```json\n"
        "[\n"
        '  {"reference": "Romans 5:8", '
        '"text": "But God demonstrates his own love for us in this: While we were still sinners, Christ died for us.", '
        '"relationship_type": "THEMATIC", "strength": 8, '
        '"description": "Both verses speak about God\'s sacrificial love"},\n'
        '  {"reference": "1 John 4:9", '
        '"text": "This is how God showed his love among us: He sent his one and only Son into the world that we might live through him.", '
        '"relationship_type": "CROSS_REFERENCE", "strength": 9, '
        '"description": "Restates the sending of the Son as the proof of love"}\n'
        "]\n"
        "```"
    ),
    "verse_relationships": '["John 3:16", "Romans 5:8", "1 John 4:9"]',
    "topic_analysis": (
        '{"verseReferences": ['
        '{"reference": "Matthew 6:14", "summary": "[MOCK] Forgiving others and being forgiven.", "relevance": "High"}, '
        '{"reference": "Colossians 3:13", "summary": "[MOCK] Bear with each other and forgive.", "relevance": "High"}, '
        '{"reference": "Luke 15:20", "summary": "[MOCK] The father runs to the returning son.", "relevance": "Medium"}'
        '], '
        '"analysis": "[MOCK] Scripture presents forgiveness as both received from God and extended to others.", '
        '"mainThemes": ["Grace", "Reconciliation", "Mercy", "Repentance", "Restoration"]}'
    ),
}
