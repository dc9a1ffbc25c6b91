"""
Injection Module for image programs
Handles the complete inject workflow: source -> instructions -> carrier pixels
"""

import os
import sys

from Constants import *
from Errors import *
from image_io import load_carrier, output_format_for, save_carrier
from lexer import tokenize
from program_loader import load_program
from stego_core import ProgramCodec, estimate_visual_impact, required_pixels
from utils import calculate_capacity_percentage, get_file_size, read_text_file

# =============================================================================
# INJECTION WORKFLOW
# =============================================================================

class ProgramInjector:
    """
    Main injector class
    Embeds a program into a carrier image with capacity and bracket checks
    """

    def __init__(self, verbose=False, delta_table=None, strict=False):
        """
        Initialize injector

        Args:
            verbose: Whether to print progress information
            delta_table: DeltaTable shared with the reading side
            strict: Reject comment characters in program sources
        """
        self.verbose = verbose
        self.strict = strict
        self.codec = ProgramCodec(delta_table)
        self.progress_callback = None

    def _log(self, message):
        """Log message if verbose mode is enabled"""
        if self.verbose:
            print(f"[INJECT] {message}", file=sys.stderr)

    def _update_progress(self, stage, percentage, message=""):
        """Update progress if callback is set"""
        if self.progress_callback:
            self.progress_callback(stage, percentage, message)

    def inject_file(self, input_image, program_file, output_image, origin=DEFAULT_ORIGIN, verify=True):
        """
        Inject a program read from a source file

        Returns:
            Tuple: (success, details)
        """
        self._log(f"Reading program from: {program_file}")
        self._update_progress("reading_program", 10, "Reading program file")

        source = read_text_file(program_file)
        success, details = self.inject_source(input_image, source, output_image, origin, verify)
        details['program_file'] = program_file
        return success, details

    def inject_source(self, input_image, source, output_image, origin=DEFAULT_ORIGIN, verify=True):
        """
        Inject program text into a carrier image

        Args:
            input_image: Path to the carrier (BMP or PNG)
            source: Program text
            output_image: Path for the output image (.bmp or .png)
            origin: Index of the anchor pixel
            verify: Re-read the written image and compare the program

        Returns:
            Tuple: (success, details)
        """
        try:
            self._log(f"Starting injection: {input_image} -> {output_image}")

            # =============================================================
            # STAGE 1: PROGRAM PREPARATION
            # =============================================================
            self._update_progress("program_prep", 20, "Lexing program")

            instructions = tokenize(source, strict=self.strict)
            program = load_program(instructions)
            self._log(f"Program: {len(instructions) - 1} instructions, {len(program.loop_pairs)} loops")

            output_format_for(output_image)

            # =============================================================
            # STAGE 2: CARRIER LOADING
            # =============================================================
            self._update_progress("validation", 35, "Reading carrier image")

            carrier = load_carrier(input_image)
            self._log_image_info(carrier.get_image_info())

            # =============================================================
            # STAGE 3: CAPACITY CHECK
            # =============================================================
            self._update_progress("capacity_check", 50, "Checking capacity")

            required = required_pixels(instructions)
            available = self.codec.capacity(carrier.pixels, origin)

            if required > available:
                self._log("INSUFFICIENT CAPACITY")
                self._log(f"   Required: {required} pixels")
                self._log(f"   Available: {available} pixels")
                raise InsufficientCapacityError(required=required, available=available)

            usage_percent = calculate_capacity_percentage(required, available)
            self._log(f"Capacity check passed: {usage_percent:.1f}% of capacity used")

            # =============================================================
            # STAGE 4: EMBEDDING
            # =============================================================
            self._update_progress("encoding", 70, "Encoding program into pixels")

            original_pixels = list(carrier.pixels)
            written = self.codec.embed(carrier.pixels, instructions, origin)

            impact = estimate_visual_impact(original_pixels, carrier.pixels)
            self._log(f"Pixels changed: {impact['changed_pixels']:,} ({impact['change_percentage']:.4f}%)")
            self._log(f"Estimated quality: {impact['quality_assessment']}")

            # =============================================================
            # STAGE 5: SAVE
            # =============================================================
            self._update_progress("reconstruction", 85, "Writing output image")

            if os.path.exists(output_image):
                self._log(f"Output file exists and will be overwritten: {output_image}")
            save_carrier(carrier, output_image)

            output_size = get_file_size(output_image)
            if output_size == 0:
                raise FileWriteError(output_image, "Output file is empty")
            self._log(f"Output file size: {output_size:,} bytes")

            # =============================================================
            # STAGE 6: VERIFICATION
            # =============================================================
            verified = None
            if verify:
                self._update_progress("verification", 95, "Verifying output")
                verified = self._verify_injection(output_image, instructions, origin)
                if not verified:
                    raise InjectionError(f"Verification failed: {output_image} does not decode to the injected program")
                self._log("Verification passed: program decodes correctly")

            self._update_progress("complete", 100, "Injection complete")

            return True, {
                'success': True,
                'input_file': input_image,
                'output_file': output_image,
                'origin': origin,
                'instruction_count': len(instructions),
                'loop_count': len(program.loop_pairs),
                'pixels_written': written,
                'image_width': carrier.width,
                'image_height': carrier.height,
                'capacity_pixels': available,
                'usage_percent': usage_percent,
                'changed_pixels': impact['changed_pixels'],
                'change_percentage': impact['change_percentage'],
                'max_channel_change': impact['max_channel_change'],
                'estimated_psnr': impact['estimated_psnr_db'],
                'quality_assessment': impact['quality_assessment'],
                'output_size': output_size,
                'verified': verified,
            }

        except BrainfreezeError:
            raise
        except Exception as e:
            raise InjectionError(f"Injection failed: {e}") from e

    def _verify_injection(self, output_image, instructions, origin):
        """Decode the written image and compare against what was injected"""
        carrier = load_carrier(output_image)
        return self.codec.extract(carrier.pixels, origin) == list(instructions)

    def _log_image_info(self, info):
        """Log image information"""
        self._log(f"Image: {info['width']} x {info['height']} pixels ({info['format']})")
        if 'bit_depth' in info:
            self._log(f"Bit depth: {info['bit_depth']}-bit")

    def get_injection_summary(self, details):
        """
        Get user-friendly injection summary

        Args:
            details: Details dictionary from inject_source

        Returns:
            Formatted summary string
        """
        if not details.get('success', False):
            return "Injection failed"

        summary = []
        summary.append("=" * 60)
        summary.append("INJECTION SUCCESSFUL")
        summary.append("=" * 60)
        summary.append(f"Input: {details['input_file']}")
        summary.append(f"Output: {details['output_file']}")
        summary.append(f"Program: {details['instruction_count'] - 1} instructions, {details['loop_count']} loops")
        summary.append(f"Image: {details['image_width']}x{details['image_height']}, origin pixel {details['origin']}")
        summary.append("-" * 60)
        summary.append(f"Capacity used: {details['usage_percent']:.1f}%")
        summary.append(f"  Available: {details['capacity_pixels']:,} pixels")
        summary.append(f"  Used: {details['pixels_written']:,} pixels")
        summary.append(f"Pixels modified: {details['changed_pixels']:,} "
                       f"({details['change_percentage']:.4f}%)")
        summary.append(f"Largest channel change: {details['max_channel_change']}")
        summary.append(f"Estimated quality: {details['quality_assessment']} "
                       f"(PSNR: {details['estimated_psnr']:.1f} dB)")
        if details['verified'] is not None:
            summary.append(f"Verified: {'Yes' if details['verified'] else 'No'}")
        summary.append("=" * 60)

        return "\n".join(summary)
