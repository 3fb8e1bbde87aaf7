"""Companies domain - Company records and their cleaner counters"""
