"""Applications domain - Cleaner and company admin onboarding applications"""
