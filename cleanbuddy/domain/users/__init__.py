"""Users domain - Current user, self-service role changes and account deletion"""
