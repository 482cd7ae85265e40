"""Social endpoints: friends and leaderboards under /api/v1/user, player lookup under /api/v1/users."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ecotrack.auth.dependencies import get_current_user
from ecotrack.database import get_session
from ecotrack.db.models import User
from ecotrack.social.directory_service import get_public_profile, search_users
from ecotrack.social.friends_service import add_friend, list_friends, remove_friend
from ecotrack.social.leaderboard_service import get_friends_leaderboard, get_leaderboard, get_user_rank
from ecotrack.social.schemas import (
    AddFriendRequest,
    FriendResponse,
    FriendsLeaderboardEntry,
    FriendsLeaderboardResponse,
    FriendsResponse,
    LeaderboardEntry,
    LeaderboardResponse,
    MessageResponse,
    PublicProfileResponse,
    RankResponse,
    UserSearchResponse,
    UserSearchResult,
)
from ecotrack.users.schemas import EcoBuddyResponse

router = APIRouter(prefix="/api/v1/user", tags=["Social"])


# --- Friends ---


@router.get("/friends", response_model=FriendsResponse)
async def friends(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    rows = await list_friends(db, user.id)
    return FriendsResponse(friends=[FriendResponse(**r) for r in rows])


@router.post("/friends/add", response_model=MessageResponse)
async def friends_add(
    body: AddFriendRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Add a friend. Adding an existing friend is a no-op."""
    created = await add_friend(db, user.id, body.friend_id)
    return MessageResponse(message="Friend added successfully" if created else "Already friends")


@router.delete("/friends/{friend_id}", response_model=MessageResponse)
async def friends_remove(
    friend_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    await remove_friend(db, user.id, friend_id)
    return MessageResponse(message="Friend removed successfully")


# --- Leaderboards ---


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def leaderboard(
    _user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Global top users by points."""
    rows = await get_leaderboard(db)
    return LeaderboardResponse(leaderboard=[LeaderboardEntry(**r) for r in rows])


@router.get("/leaderboard/friends", response_model=FriendsLeaderboardResponse)
async def friends_leaderboard(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    rows = await get_friends_leaderboard(db, user.id)
    return FriendsLeaderboardResponse(leaderboard=[FriendsLeaderboardEntry(**r) for r in rows])


@router.get("/leaderboard/rank", response_model=RankResponse)
async def my_rank(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Where the user stands by points."""
    return RankResponse(**await get_user_rank(db, user.id))


# --- User directory ---

directory_router = APIRouter(prefix="/api/v1/users", tags=["Social"])


@directory_router.get("/search", response_model=UserSearchResponse)
async def users_search(
    query: str = Query(..., max_length=50),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    """Find players to befriend by username or name."""
    rows = await search_users(db, user.id, query)
    return UserSearchResponse(users=[UserSearchResult(**r) for r in rows])


@directory_router.get("/{user_id}", response_model=PublicProfileResponse)
async def users_profile(
    user_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_session),
):
    profile = await get_public_profile(db, user.id, user_id)
    if profile["ecobuddy"] is not None:
        profile["ecobuddy"] = EcoBuddyResponse.model_validate(profile["ecobuddy"])
    return PublicProfileResponse(**profile)
