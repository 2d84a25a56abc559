"""vSphere CSI driver compatibility guard (csiguard).

Gate installation and upgrades of the vSphere CSI driver on the health of the
underlying vSphere platform and cluster nodes.
"""

__version__ = "0.1.0"
__author__ = "Platform Engineering Team"
__license__ = "Apache-2.0"
