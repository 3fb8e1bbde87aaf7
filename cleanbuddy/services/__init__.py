"""Side-channel collaborators: notifications, document storage"""
