"""
Messaging app: direct messages, groups, memberships and group messages.
"""
