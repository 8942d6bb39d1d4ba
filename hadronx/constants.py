"""
Physical and numerical constants for HadronX.

Units: GeV, fm, mb (natural units c = 1).
"""

import math

# GeV <-> fm conversion factor
hbarc = 0.197327053
# mb <-> fm^2 conversion factor
fm2_mb = 0.1
# Numerical error tolerance
really_small = 1.0e-6
twopi = 2.0 * math.pi
# Nucleon mass (GeV)
nucleon_mass = 0.938
# Pion mass (GeV)
pion_mass = 0.138
# Interaction radius entering the Blatt-Weisskopf factors (GeV^-1)
interaction_radius = 1.0 / hbarc

# Coherence suppression of leading string hadrons (UrQMD CTParam(59))
string_suppression_factor = 0.7

# Retry budget for the soft string sub-processes
soft_string_max_tries = 10000

# Largest seed accepted by the hadronization generator
max_generator_seed = 900_000_000

# -----------------------------
# PDG codes used by the core
# -----------------------------
PDG_PROTON = 2212
PDG_NEUTRON = 2112
PDG_PI_PLUS = 211
PDG_PI_ZERO = 111
PDG_K_ZERO = 311
PDG_K_SHORT = 310
PDG_K_LONG = 130
PDG_RHO_ZERO = 113
PDG_H1 = 10223
