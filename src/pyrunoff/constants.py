"""Runoff engine numerical constants.

Fixed values used by the sub-area solver, the ODE integrator and the
pollutant washoff computations. Internal units are feet and seconds.
"""

# Manning equation
MCOEFF: float = 1.49  # Constant in Manning's equation (US units)
MEXP: float = 1.6666667  # Exponent in Manning's equation (5/3)

# ODE integration of ponded depth
ODETOL: float = 0.0001  # Acceptable relative error for the ODE solver
MAX_ODE_STEPS: int = 10000  # Maximum number of adaptive sub-steps per integration

# Thresholds
ZERO: float = 1.0e-10  # Effectively zero excess depth [ft]
MIN_RUNOFF: float = 2.31481e-8  # Minimum runoff rate for washoff [ft/s] (0.001 in/hr)
MIN_RUNOFF_FLOW: float = 0.001  # Minimum reportable runoff flow [cfs]
MIN_TOTAL_DEPTH: float = 0.004167  # Minimum snow depth that blocks street sweeping [ft]
MIN_SNOW_DEPTH: float = 0.001 / 12.0  # Snow depth below which snow-only buildup stops [ft]

# Unit factors
LPERFT3: float = 28.317  # Liters per cubic foot
FT2PERACRE: float = 43560.0  # Square feet per acre
SECPERDAY: float = 86400.0  # Seconds per day
SECPERHOUR: float = 3600.0  # Seconds per hour
INPERFT: float = 12.0  # Inches per foot

# Number of sub-area types per subcatchment
N_SUBAREAS: int = 3
