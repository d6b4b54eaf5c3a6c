"""
Persistence of imported skeletons (raw BVH text plus metadata).
"""

from .skeleton_storage import SkeletonStorage, StoredSkeleton, StoredSkeletonInfo

__all__ = ["SkeletonStorage", "StoredSkeleton", "StoredSkeletonInfo"]
