# bake_dataset.py

"""
================================================================================
OFFLINE DATASET BAKER SCRIPT
================================================================================
This script is a command-line tool for generating a simulated farm dataset
once and writing it to disk ("baking"): the map metadata, the field polygons,
one grid GeoJSON per layer and one PNG preview per layer.

Usage:
    python bake_dataset.py [--config path/to/config.json] [--output out_dir]
================================================================================
"""
import os
import sys
import json
import logging
import argparse
import time
import numpy as np
from PIL import Image
from tqdm import tqdm

from farm_simulator import FarmSimulation
from farm_simulator import config as DEFAULTS
from farm_simulator import legends

# --- Preview Constants ---
# Each grid cell is drawn as a square block of this many pixels.
PREVIEW_PIXELS_PER_CELL = 8

def save_layer_preview(values: np.ndarray, layer: str, file_path: str) -> str:
    """
    Paints a layer with its legend colors and saves it as a PNG with Pillow.
    Grid row 0 is the southern edge, so rows are flipped to put north on top.
    """
    colors = legends.get_layer_color_array(values, layer)
    colors = np.flipud(colors)
    colors = np.repeat(np.repeat(colors, PREVIEW_PIXELS_PER_CELL, axis=0), PREVIEW_PIXELS_PER_CELL, axis=1)
    img = Image.fromarray(np.ascontiguousarray(colors), 'RGB')
    img.save(file_path, 'PNG')
    return file_path

def _write_json(data, file_path: str):
    with open(file_path, 'w') as f:
        json.dump(data, f, indent=2)

def load_config(config_path: str, logger: logging.Logger):
    """Reads the 'simulation_parameters' section of a JSON config file."""
    logger.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.critical(f"Failed to load or parse config file: {e}")
        return None
    return config.get('simulation_parameters', {})

# --- Main Baking Function ---
def bake_dataset(config_path: str = None, output_dir: str = None, logger: logging.Logger = None):
    """
    Generates the dataset and saves every artifact under `output_dir`.

    Returns:
        str: The output directory, or None if the configuration could not be read.
    """
    logger = logger or logging.getLogger("Baker")

    # 1. --- Load Configuration ---
    params = {}
    if config_path:
        params = load_config(config_path, logger)
        if params is None:
            return None

    start_time = time.perf_counter()

    # 2. --- Run the Generation Pipeline Once ---
    simulation = FarmSimulation(config=params, logger=logger)

    if output_dir is None:
        output_dir = os.path.join("baked_datasets", f"seed_{simulation.settings['field_seed']}")
    grid_dir = os.path.join(output_dir, "grid")
    preview_dir = os.path.join(output_dir, "previews")
    os.makedirs(grid_dir, exist_ok=True)
    os.makedirs(preview_dir, exist_ok=True)

    # 3. --- Dataset-wide Artifacts ---
    _write_json(simulation.meta(), os.path.join(output_dir, "meta.json"))
    _write_json(simulation.fields(), os.path.join(output_dir, "fields.geojson"))
    _write_json(simulation.settings, os.path.join(output_dir, "generation_config.json"))

    # 4. --- Per-layer Grids and Previews ---
    for layer in tqdm(DEFAULTS.LAYER_NAMES, desc="Baking Layers"):
        _write_json(simulation.grid(layer), os.path.join(grid_dir, f"{layer}.geojson"))
        save_layer_preview(
            simulation.layers[layer].as_array(), layer, os.path.join(preview_dir, f"{layer}.png")
        )

    end_time = time.perf_counter()
    logger.info(f"Baking complete! Total time: {end_time - start_time:.2f} seconds.")
    logger.info(f"Dataset with {simulation.meta()['fieldCount']} fields saved to: {output_dir}")
    return output_dir


# --- Command-Line Interface ---
def main(argv=None):
    parser = argparse.ArgumentParser(description="Offline dataset baker for the precision farm simulator.")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a JSON configuration file with a 'simulation_parameters' section."
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Directory to write the baked dataset to."
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    result = bake_dataset(args.config, args.output, logging.getLogger("Baker"))
    return 0 if result else 1

if __name__ == "__main__":
    sys.exit(main())
