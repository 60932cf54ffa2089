# platerec

`platerec` finds a blue licence plate in a photograph, straightens it, cuts
it into seven characters and reads each character by comparing it with a
set of template images.

## How it works

1. **Colour mask.** `platerec.binarize.blue_mask` marks the pixels whose
   colour is close to a blue plate background. The reference colour and
   tolerances come from `ColorThreshold`: by default blue 160, green 60,
   red 60, a tolerance of 95 on blue and 60 on green and red, and blue
   must exceed both green and red by a factor of more than 1.1. The mask
   is then dilated and eroded five times each with a 3×3 kernel.
2. **Plate location.** `platerec.geometry.find_external_contours` traces
   the outer contours of the mask. `platerec.locate.find_plate` keeps a
   contour when its area is strictly between 1,000 and 50,000 pixels, its
   minimum-area rectangle (`min_area_rect`) has an area between 2,000 and
   50,000, a long-to-short axis ratio between 2.2 and 3.8, and the contour
   fills between 63 % and 137 % of it. When several contours qualify, the
   last one in contour order wins. The result is a `PlateCandidate`, or
   `None` when nothing qualifies.
3. **Straightening and cropping.** `straighten` rotates the image about
   the plate centre so the plate lies level; `crop_plate` cuts the plate
   out and scales it to 500 pixels wide, keeping its aspect ratio.
   `draw_box` returns a copy of the input with the plate box outlined in
   red.
4. **Segmentation** (`platerec.segment`). `binarize_plate` converts the
   plate to grey and splits it with Otsu's threshold; `clear_border`
   blanks the frame and the gap after the first character;
   `isolate_characters` copies character-sized blobs onto a white canvas;
   `character_boxes` boxes them left to right; `arrange_boxes` keeps the
   rightmost seven, widens narrow ones to 60 pixels and merges extra boxes
   on the left into the first character; `cut_characters` crops each box
   from the binary plate, inverted. Fewer than seven boxes is an error.
5. **Recognition** (`platerec.templates`). Each character and each
   template is converted to grey and scaled to 60×100; `match_error` is
   the mean absolute pixel difference scaled to 0–1, and a character's
   error against a template is the best over its variants. `classify`
   reads the first position as a province character, the second as a
   letter and the remaining five as letters or digits; ties go to the
   later template.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Templates

Recognition needs a directory of template images: one entry per item of
`platerec.templates.WORDS` (65 in all: digits, the letters used on plates
and the province characters), three variants each, read as greyscale. The
images for one character live in a sub-directory named after it, with the
variants numbered 0 to 2:

```
model_new/
    A/
        A-0.jpg
        A-1.jpg
        A-2.jpg
    B/
        B-0.jpg
        ...
```

`template_path(root, index, variant)` gives the exact path expected for
each template. Two entries of `WORDS` share the name `7` and two share
`京`, so those directories serve both entries. `TemplateSet.load(root)`
raises `FileNotFoundError` when any template image is missing.

## Command line

```
platerec IMAGE [--templates DIR] [--save-stages DIR]
```

Reads the plate in `IMAGE` and prints its text. `--templates` names the
template directory (default `model_new`); `--save-stages` writes the
intermediate images into the given directory. The exit status is 1, with
a message on standard error, when templates or the image cannot be read,
no plate is found or too few characters are cut from it.

## Python use

```python
from platerec.binarize import ColorThreshold
from platerec.pipeline import PlateRecognitionError, load_image, recognize, save_stages
from platerec.templates import TemplateSet

templates = TemplateSet.load("model_new")
image = load_image("car.jpg")

try:
    result = recognize(image, templates, ColorThreshold())
except PlateRecognitionError as exc:
    print("no plate read:", exc)
else:
    print(result.text)
    save_stages(result, "stages")
```

`load_image` returns an RGB array and raises `FileNotFoundError` for a
missing file and `PlateRecognitionError` for one that is not an image.
`recognize` returns a `RecognitionResult` holding the text, the
`PlateCandidate`, every stage image, the character boxes and crops; it
raises `PlateRecognitionError` when no plate region is found or fewer than
seven characters can be cut. `save_stages` writes `located.png`,
`plate.png`, `binary.png` and `characters.png` into the directory and each
character crop as `result/<n>.png`, and returns the written paths.

The building blocks work on their own too, for instance
`platerec.binarize.otsu_threshold` on any greyscale array or
`platerec.geometry.min_area_rect` on any set of points.

## What it does not do

`platerec` works on still images only. It has no video or camera input,
no graphical window for viewing images or results, and no general OCR
engine: characters are read solely by matching against the template
images you supply, and only blue plates with seven characters are
handled.