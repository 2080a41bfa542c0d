import numpy as np
from pyionflame import FlameConfig, RunContext, run_flame
from pyionflame.utils.logging import setup_logging
from pyionflame.utils.visualization import FlameVisualizer

# Create run configuration
config = FlameConfig(
    mechanism='gri30_ion.yaml',
    fuel='CH4',
    oxidizer='O2:0.21,N2:0.79',
    pressure=101325.0,  # 1 atm
    T_in=300.0,         # K
    u_in=0.3,           # m/s

    # Initial grid
    grid_points=6,
    width=0.1,  # m

    # Refinement criteria
    ratio=10.0,
    slope=0.08,
    curve=0.1,

    loglevel=1,
    output_dir='field_sweep',
)
setup_logging(config.loglevel)

phi = 1.0
fields = np.linspace(0.0, 1000.0, 5)  # V/m

# Each field value is an independent run on fresh domains
viz = FlameVisualizer()
for e_field in fields:
    context = RunContext.cantera(config)
    result = run_flame(context, phi, e_field)
    viz.save_state(result.profile, e_field, result.gap_voltage)
    print(f"E = {e_field:8.1f} V/m, V_gap = {result.gap_voltage:.6e} V, "
          f"S_L = {result.profile.flame_speed:.4f} m/s, n_points = {result.profile.n_points}")

# Plot results
viz.plot_profile(viz.history[-1]['profile'], 'field_sweep/profile.png',
                 title=f'phi = {phi}, E = {fields[-1]} V/m')
viz.plot_gap_voltage('field_sweep/gap_voltage.png')
