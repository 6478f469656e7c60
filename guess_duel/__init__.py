"""
Guess Duel: a two-player "guess the famous person" game judged by an LLM.
"""
