"""Cluster selection policies for choosing which patch feeds each surface fit."""

import numpy as np
from typing import List, Optional

from ..data_models import NormalField
from ..utils.config_manager import VALID_CLUSTER_POLICIES


class ClusterSelector:
    """Picks one cluster out of a size-ordered cluster list."""

    def __init__(self, policy: str = 'largest'):
        if policy not in VALID_CLUSTER_POLICIES:
            raise ValueError(f"Unknown cluster policy '{policy}', expected one of {VALID_CLUSTER_POLICIES}")
        self.policy = policy

    def select(self,
               clusters: List[np.ndarray],
               normal_field: NormalField,
               min_points: int) -> Optional[np.ndarray]:
        """
        Select a cluster according to the policy.

        Clusters with fewer than min_points members are never eligible.

        Args:
            clusters: Cluster index arrays ordered by descending size
            normal_field: Normal field of the clustered cloud
            min_points: Smallest cluster the downstream fit can use

        Returns:
            The selected cluster indices, or None if no cluster is eligible
        """
        candidates = [cluster for cluster in clusters if len(cluster) >= min_points]
        if not candidates:
            return None

        if self.policy == 'largest':
            return candidates[0]
        if self.policy == 'second_largest':
            return candidates[1] if len(candidates) > 1 else None

        # most_curved: highest mean surface variation, first on ties
        mean_curvatures = [float(np.mean(normal_field.curvatures[cluster])) for cluster in candidates]
        return candidates[int(np.argmax(mean_curvatures))]
