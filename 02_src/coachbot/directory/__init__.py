"""Member directory module."""

from .arbox import ArboxDirectory, IMemberDirectory, Member, match_members

__all__ = ["ArboxDirectory", "IMemberDirectory", "Member", "match_members"]
