"""
API router - Combines all endpoint routers under /api.
"""

from fastapi import APIRouter

from streamflow.api.endpoints import auth, history, songs, user

api_router = APIRouter()

api_router.include_router(auth.router)
api_router.include_router(songs.router)
api_router.include_router(user.router)
api_router.include_router(history.router)

# API metadata for documentation
tags_metadata = [
    {
        "name": "Authentication",
        "description": "Password and Google sign-in, email verification, account deletion",
    },
    {
        "name": "Catalog",
        "description": "Jamendo tracks and YouTube music videos",
    },
    {
        "name": "User activity",
        "description": "Likes, playlists and activity statistics",
    },
    {
        "name": "History",
        "description": "The capped watch history",
    },
]
