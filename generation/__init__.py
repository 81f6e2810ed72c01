"""
Exercise Generation Pipeline
generation/

Steps:
1. Prompt Builder       — method-constrained instruction text (quiz items / material)
2. Generation Client    — model call with retry-and-repair (sanitize → JSON parse)
3. Constraint Validator — per-method rules, asset whitelist, quantity bound
4. Question Bank        — content-addressed insert-if-absent (database/question_bank.py)
"""
