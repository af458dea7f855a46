from .robust_procrustes import RobustProcrustes
