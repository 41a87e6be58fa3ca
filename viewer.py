# NOTE: For displaying the decoded image in a GUI,
#       please download PyQt5.
#
# Installation (in terminal):
#   pip install PyQt5
import logging
import sys

from PyQt5.QtWidgets import (
    QApplication, QWidget, QVBoxLayout, QPushButton, QLabel,
    QFileDialog, QTextEdit, QSlider, QHBoxLayout, QCheckBox
)
from PyQt5.QtGui import QPixmap, QImage, qRgb
from PyQt5.QtCore import Qt

from bmp_parser import BMPParser
from errors import BMPError

logger = logging.getLogger('bmpconv.viewer')


def buffer_to_qimage(buffer, brightness=1.0, channels=(True, True, True), scale=1.0):
    r_enabled, g_enabled, b_enabled = channels

    new_w = max(1, int(buffer.width * scale))
    new_h = max(1, int(buffer.height * scale))

    image = QImage(new_w, new_h, QImage.Format_RGB32)

    # Loop through each pixel and apply brightness and RGB toggle
    for y in range(new_h):
        src_y = min(int(y / scale), buffer.height - 1)
        for x in range(new_w):
            src_x = min(int(x / scale), buffer.width - 1)

            R, G, B = buffer.get(src_x, src_y)

            if not r_enabled:
                R = 0
            if not g_enabled:
                G = 0
            if not b_enabled:
                B = 0

            R = int(R * brightness)
            G = int(G * brightness)
            B = int(B * brightness)

            image.setPixel(x, y, qRgb(R, G, B))

    return image


class BMPViewer(QWidget):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("BMP Viewer")
        self.resize(700, 500)

        # Decoded image buffer
        self.image = None

        # RGB channels toggle and display settings
        self.r_enabled = True
        self.g_enabled = True
        self.b_enabled = True
        self.brightness = 1.0
        self.scale = 1.0

        layout = QVBoxLayout()

        top_layout = QHBoxLayout()

        # Button to open BMP file
        self.open_button = QPushButton("Open BMP File")
        self.open_button.setFixedSize(150, 50)
        self.open_button.clicked.connect(self.open_file)
        top_layout.addWidget(self.open_button)

        top_layout.addStretch()

        # Checkboxes to enable/disable R, G, B channels
        self.r_button = QCheckBox("R")
        self.g_button = QCheckBox("G")
        self.b_button = QCheckBox("B")

        self.r_button.clicked.connect(self.toggle_r)
        self.g_button.clicked.connect(self.toggle_g)
        self.b_button.clicked.connect(self.toggle_b)

        for btn in (self.r_button, self.g_button, self.b_button):
            btn.setChecked(True)
            btn.setFixedSize(30, 30)
            top_layout.addWidget(btn)

        layout.addLayout(top_layout)

        # Label to display the image
        self.image_label = QLabel("No Image Loaded")
        self.image_label.setStyleSheet("border: 1px solid black; background: white;")
        self.image_label.setAlignment(Qt.AlignCenter)
        self.image_label.setFixedSize(700, 400)
        layout.addWidget(self.image_label)

        # Text box to display BMP metadata
        self.metadata_box = QTextEdit("No Metadata Loaded")
        self.metadata_box.setMinimumHeight(150)
        self.metadata_box.setReadOnly(True)
        layout.addWidget(self.metadata_box)

        # Slider for brightness adjustment
        self.brightness_slider = QSlider(Qt.Horizontal)
        self.brightness_slider.setRange(0, 100)
        self.brightness_slider.setValue(100)
        self.brightness_slider.valueChanged.connect(self.update_image)
        layout.addWidget(QLabel("Brightness"))
        layout.addWidget(self.brightness_slider)

        # Slider for scaling the image
        self.scale_slider = QSlider(Qt.Horizontal)
        self.scale_slider.setRange(1, 100)
        self.scale_slider.setValue(100)
        self.scale_slider.valueChanged.connect(self.update_image)
        layout.addWidget(QLabel("Scale"))
        layout.addWidget(self.scale_slider)

        self.setLayout(layout)

    # Open BMP file and decode it
    def open_file(self):
        filepath, _ = QFileDialog.getOpenFileName(self, "Open BMP File", "", "BMP Files (*.bmp)")
        if not filepath:
            return
        self.load_file(filepath)

    def load_file(self, filepath):
        parser = BMPParser(filepath)
        try:
            parser.load()
        except BMPError as e:
            logger.error(f"Could not decode {filepath}: {e}")
            self.metadata_box.setText(f"Error: {e}")
            return False

        # Display metadata
        meta_text = ""
        for k, v in parser.metadata.items():
            meta_text += f"{k}: {v}\n"
        self.metadata_box.setText(meta_text)

        self.show_buffer(parser.image)
        return True

    def show_buffer(self, image):
        self.image = image
        self.update_image()

    # Update image display based on settings
    def update_image(self):
        if self.image is None:
            return

        self.brightness = self.brightness_slider.value() / 100.0
        self.scale = self.scale_slider.value() / 100.0

        image = buffer_to_qimage(
            self.image,
            brightness=self.brightness,
            channels=(self.r_enabled, self.g_enabled, self.b_enabled),
            scale=self.scale,
        )

        # Show updated image
        pixmap = QPixmap.fromImage(image)
        self.image_label.setPixmap(pixmap)

    # Toggle R channel
    def toggle_r(self):
        self.r_enabled = self.r_button.isChecked()
        self.update_image()

    # Toggle G channel
    def toggle_g(self):
        self.g_enabled = self.g_button.isChecked()
        self.update_image()

    # Toggle B channel
    def toggle_b(self):
        self.b_enabled = self.b_button.isChecked()
        self.update_image()


def run_viewer(filepath=None):
    app = QApplication.instance() or QApplication(sys.argv)
    viewer = BMPViewer()
    if filepath:
        viewer.load_file(filepath)
    viewer.show()
    return app.exec_()
